"""
Error Handling Module
---------------------
Typed launcher errors with classification and user-facing reporting.

Every failure the resolution pipeline can raise derives from LauncherError
and carries an ErrorCategory. The ErrorHandler turns any exception into a
log entry at the right severity plus a message for the user, keeping the
original text intact.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Dict, List, Optional
import logging
import traceback


class ErrorCategory(Enum):
    """Categories of errors for handling decisions."""
    INPUT_VALIDATION = auto()         # Null/empty required argument
    CONFIG_NOT_FOUND = auto()         # Configuration file missing
    CONFIG_PARSE = auto()             # YAML syntax error
    CONFIG_VALIDATION = auto()        # Entry missing name/linkto
    CONFIG_WRITE = auto()             # Sample config could not be written
    UNKNOWN_COMMAND = auto()          # Not registered, not a URL, not a path
    UNKNOWN_SPECIAL_COMMAND = auto()  # "!something" outside the vocabulary
    NOT_SPECIAL_COMMAND = auto()      # Special dispatch without "!"
    RELOAD_PRECONDITION = auto()      # Reload before initialize
    INVALID_STATE = auto()            # Operation not valid in current state
    LAUNCH_FAILURE = auto()           # Launcher could not start the target
    SYSTEM_ERROR = auto()             # Anything unexpected


class LauncherError(Exception):
    """Base exception for all launcher errors."""

    category: ErrorCategory = ErrorCategory.SYSTEM_ERROR
    user_message: str = "An error occurred"

    def __init__(self, message: Optional[str] = None, *, user_message: Optional[str] = None):
        super().__init__(message or self.user_message)
        if user_message:
            self.user_message = user_message


class InputValidationError(LauncherError, ValueError):
    """A required argument was None, empty or whitespace."""

    category = ErrorCategory.INPUT_VALIDATION
    user_message = "Invalid input"


# Configuration errors

class ConfigError(LauncherError):
    """Configuration file errors. Always carry the file path."""

    category = ErrorCategory.CONFIG_VALIDATION
    user_message = "Configuration error"

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ConfigNotFoundError(ConfigError):
    """Configuration file does not exist."""

    category = ErrorCategory.CONFIG_NOT_FOUND
    user_message = "Configuration file not found"

    def __init__(self, path: str):
        super().__init__(f"Configuration file not found: {path}", path=path)


class ConfigParseError(ConfigError):
    """Configuration content is not valid YAML."""

    category = ErrorCategory.CONFIG_PARSE
    user_message = "Configuration file could not be parsed"

    def __init__(
        self,
        path: str,
        reason: str,
        line: Optional[int] = None,
        column: Optional[int] = None
    ):
        location = ""
        if line is not None:
            location = f" at line {line}, column {column}"
        super().__init__(f"YAML syntax error in file '{path}'{location}: {reason}", path=path)
        self.reason = reason
        self.line = line
        self.column = column


class ConfigValidationError(ConfigError):
    """A command entry parsed but is missing a required field."""

    category = ErrorCategory.CONFIG_VALIDATION
    user_message = "Invalid configuration"

    def __init__(
        self,
        path: str,
        reason: str,
        index: Optional[int] = None,
        name: Optional[str] = None
    ):
        if index is None:
            subject = "Configuration"
        elif name:
            subject = f"Command '{name}' at index {index}"
        else:
            subject = f"Command at index {index}"
        super().__init__(
            f"Configuration validation failed in '{path}': {subject} {reason}",
            path=path
        )
        self.reason = reason
        self.index = index
        self.name = name


class ConfigWriteError(ConfigError):
    """Sample configuration could not be written."""

    category = ErrorCategory.CONFIG_WRITE
    user_message = "Could not create configuration file"


# Resolution and dispatch errors

class UnknownCommandError(LauncherError, LookupError):
    """Input is not a registered command, a URL or a drive path."""

    category = ErrorCategory.UNKNOWN_COMMAND
    user_message = "Unknown command"

    def __init__(self, command_input: str):
        super().__init__(
            f"Cannot resolve command '{command_input}': "
            "not a registered command, URL or path"
        )
        self.command_input = command_input


class SpecialCommandError(LauncherError):
    """Special command dispatch errors."""

    category = ErrorCategory.UNKNOWN_SPECIAL_COMMAND
    user_message = "Special command error"

    def __init__(self, message: str, command: str):
        super().__init__(message)
        self.command = command


class UnknownSpecialCommandError(SpecialCommandError):
    """A "!" token outside the fixed vocabulary."""

    category = ErrorCategory.UNKNOWN_SPECIAL_COMMAND
    user_message = "Unknown special command"


class NotASpecialCommandError(SpecialCommandError):
    """Special dispatch was asked to handle input without a "!" prefix."""

    category = ErrorCategory.NOT_SPECIAL_COMMAND
    user_message = "Not a special command"


class SpecialCommandRoutingError(SpecialCommandError):
    """The executor was handed a special command; the orchestrator owns those."""

    category = ErrorCategory.NOT_SPECIAL_COMMAND
    user_message = "Special commands cannot be launched"


# Orchestrator lifecycle errors

class ReloadPreconditionError(LauncherError):
    """Reload attempted before a configuration path was set."""

    category = ErrorCategory.RELOAD_PRECONDITION
    user_message = "No configuration loaded yet"


class InvalidStateError(LauncherError):
    """Operation is not valid in the orchestrator's current state."""

    category = ErrorCategory.INVALID_STATE
    user_message = "Operation not allowed right now"


class ConfigurationLoadError(LauncherError):
    """
    Wraps a loader failure with the path it was loading from.

    The original error is chained as __cause__ and its category is
    reported as this error's category.
    """

    user_message = "Configuration could not be loaded"

    def __init__(self, message: str, path: str, cause: BaseException):
        super().__init__(message)
        self.path = path
        self.cause = cause

    @property
    def category(self) -> ErrorCategory:  # type: ignore[override]
        return categorize(self.cause)


class InitializationError(ConfigurationLoadError):
    """Initial configuration load failed; orchestrator stays uninitialized."""

    user_message = "Failed to initialize from configuration"


class ReloadError(ConfigurationLoadError):
    """Reload failed; the previously active commands are kept."""

    user_message = "Failed to reload configuration"


def categorize(exception: BaseException) -> ErrorCategory:
    """Classify any exception into an ErrorCategory."""
    if isinstance(exception, LauncherError):
        return exception.category
    if isinstance(exception, OSError):
        return ErrorCategory.LAUNCH_FAILURE
    return ErrorCategory.SYSTEM_ERROR


@dataclass
class ErrorRecord:
    """
    Structured error with metadata.

    Used for consistent error handling and reporting.
    """
    category: ErrorCategory
    message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=datetime.now)
    stack_trace: Optional[str] = None

    @classmethod
    def from_exception(
        cls,
        exception: BaseException,
        details: Optional[Dict] = None
    ) -> "ErrorRecord":
        """Create a record from an exception."""
        stack = None
        if exception.__traceback__ is not None:
            stack = "".join(traceback.format_exception(
                type(exception), exception, exception.__traceback__
            ))
        return cls(
            category=categorize(exception),
            message=str(exception),
            details=details,
            stack_trace=stack
        )

    def __repr__(self) -> str:
        return f"ErrorRecord({self.category.name}: {self.message})"


class ErrorHandler:
    """
    Central error handler with logging and user reporting.
    """

    LOG_LEVELS: Dict[ErrorCategory, int] = {
        ErrorCategory.INPUT_VALIDATION: logging.INFO,
        ErrorCategory.UNKNOWN_COMMAND: logging.INFO,
        ErrorCategory.UNKNOWN_SPECIAL_COMMAND: logging.INFO,
        ErrorCategory.NOT_SPECIAL_COMMAND: logging.INFO,
        ErrorCategory.RELOAD_PRECONDITION: logging.WARNING,
        ErrorCategory.INVALID_STATE: logging.WARNING,
        ErrorCategory.CONFIG_NOT_FOUND: logging.ERROR,
        ErrorCategory.CONFIG_PARSE: logging.ERROR,
        ErrorCategory.CONFIG_VALIDATION: logging.ERROR,
        ErrorCategory.CONFIG_WRITE: logging.ERROR,
        ErrorCategory.LAUNCH_FAILURE: logging.ERROR,
        ErrorCategory.SYSTEM_ERROR: logging.CRITICAL,
    }

    def __init__(self, logger: Optional[logging.Logger] = None, max_history: int = 100):
        self._logger = logger or logging.getLogger("keylauncher.errors")
        self._error_history: List[ErrorRecord] = []
        self._max_history = max_history

    def handle(self, exception: BaseException, details: Optional[Dict] = None) -> str:
        """
        Handle an error and return the message to show the user.
        """
        record = ErrorRecord.from_exception(exception, details)
        self._log_error(record)

        self._error_history.append(record)
        if len(self._error_history) > self._max_history:
            self._error_history.pop(0)

        return self._get_user_message(exception, record)

    def _log_error(self, record: ErrorRecord) -> None:
        """Log error with appropriate level."""
        level = self.LOG_LEVELS.get(record.category, logging.ERROR)

        self._logger.log(
            level,
            f"{record.category.name}: {record.message}",
            extra={"details": record.details}
        )

        if record.stack_trace and level >= logging.CRITICAL:
            self._logger.debug(f"Stack trace:\n{record.stack_trace}")

    def _get_user_message(self, exception: BaseException, record: ErrorRecord) -> str:
        """Headline plus the original message."""
        headline = getattr(exception, "user_message", None)
        if headline is None:
            if record.category == ErrorCategory.LAUNCH_FAILURE:
                headline = "Failed to launch"
            else:
                headline = "Unexpected error"
        return f"{headline}: {record.message}"

    @property
    def history(self) -> List[ErrorRecord]:
        return self._error_history.copy()

    def get_error_stats(self) -> Dict[str, int]:
        """Get error statistics."""
        stats: Dict[str, int] = {}
        for record in self._error_history:
            key = record.category.name
            stats[key] = stats.get(key, 0) + 1
        return stats

    def clear_history(self) -> None:
        """Clear error history."""
        self._error_history.clear()
