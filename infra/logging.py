"""
Centralized Logging
-------------------
Structured logging with submission_id propagation.

Design:
- Every submitted input gets a unique submission_id
- submission_id propagates through: Orchestrator -> Executor -> Launcher
- Console output through Rich, file output as JSON lines
- Severity discipline: INFO=state, WARNING=recoverable, ERROR=abort

Usage:
    from infra.logging import get_logger, SubmissionContext

    logger = get_logger("core")

    with SubmissionContext() as submission_id:
        logger.info("Resolving input")

Nothing here runs on import; hosts call configure_logging() once.
"""

import contextvars
import json
import logging
import logging.handlers
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


ROOT_LOGGER_NAME = "keylauncher"
LOG_FILE_NAME = "keylauncher.log"
MAX_LOG_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 3

_submission_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "submission_id", default=None
)


def generate_submission_id() -> str:
    """Generate a unique submission ID."""
    return f"sub_{uuid.uuid4().hex[:12]}"


def get_submission_id() -> Optional[str]:
    """Get the current submission ID from context."""
    return _submission_id_var.get()


class SubmissionContext:
    """
    Context manager scoping one submitted input.

    Usage:
        with SubmissionContext() as submission_id:
            logger.info("Processing...")
    """

    def __init__(self, submission_id: Optional[str] = None):
        self._submission_id = submission_id or generate_submission_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = _submission_id_var.set(self._submission_id)
        return self._submission_id

    def __exit__(self, *args) -> None:
        if self._token is not None:
            _submission_id_var.reset(self._token)
            self._token = None


class SubmissionIdFilter(logging.Filter):
    """Logging filter that adds submission_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "submission_id", None) is None:
            record.submission_id = get_submission_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured file logging."""

    EXTRA_FIELDS = ("details", "command", "target", "execution_time_ms", "config_path")

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "submission_id": getattr(record, "submission_id", "-"),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in self.EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, default=str)


_logging_initialized = False
_log_file_path: Optional[Path] = None


def configure_logging(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    console: bool = True,
    file: bool = True,
    rich_console: Optional[Console] = None,
    force: bool = False,
) -> logging.Logger:
    """
    Configure the launcher logging system.

    Args:
        level: Logging level name (default INFO)
        log_dir: Directory for log files (default: ./logs)
        console: Enable Rich console output
        file: Enable JSON file output
        rich_console: Console to render to (default: a stderr console)
        force: Reconfigure even if already configured

    Returns:
        The root launcher logger
    """
    global _logging_initialized, _log_file_path

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)

    if _logging_initialized and not force:
        return root_logger

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(logging.DEBUG if file else numeric_level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    submission_filter = SubmissionIdFilter()

    if console:
        console_handler = RichHandler(
            console=rich_console or Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
        )
        console_handler.setLevel(numeric_level)
        console_handler.addFilter(submission_filter)
        root_logger.addHandler(console_handler)

    if file:
        log_path = Path(log_dir) if log_dir else Path("logs")
        log_path.mkdir(parents=True, exist_ok=True)

        _log_file_path = log_path / LOG_FILE_NAME

        file_handler = logging.handlers.RotatingFileHandler(
            _log_file_path,
            maxBytes=MAX_LOG_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)  # File gets everything
        file_handler.setFormatter(JSONFormatter())
        file_handler.addFilter(submission_filter)
        root_logger.addHandler(file_handler)

    root_logger.propagate = False
    _logging_initialized = True
    return root_logger


def get_log_file_path() -> Optional[Path]:
    """Path of the JSON log file, if file logging is configured."""
    return _log_file_path


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger in the launcher namespace.

    Args:
        name: Logger name (prefixed with 'keylauncher.' if not already)
    """
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)
