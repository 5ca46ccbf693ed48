# Infrastructure module - Logging

from .logging import (
    get_logger, configure_logging, get_log_file_path,
    SubmissionContext, SubmissionIdFilter, JSONFormatter,
    get_submission_id, generate_submission_id,
)

__all__ = [
    "get_logger",
    "configure_logging",
    "get_log_file_path",
    "SubmissionContext",
    "SubmissionIdFilter",
    "JSONFormatter",
    "get_submission_id",
    "generate_submission_id",
]
