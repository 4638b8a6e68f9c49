"""Core module exports."""

from covreport.core.errors import (
    ConfigError,
    CovReportError,
    ErrorCode,
    InternalError,
    IOFailure,
    JobValidationError,
    ProcessingError,
    SourceNotFoundError,
)
from covreport.core.logging import (
    configure_logging,
    get_log_file_path,
    get_logger,
)
from covreport.core.progress import pluralize, status

__all__ = [
    # Errors
    "ConfigError",
    "CovReportError",
    "ErrorCode",
    "InternalError",
    "IOFailure",
    "JobValidationError",
    "ProcessingError",
    "SourceNotFoundError",
    # Logging
    "configure_logging",
    "get_log_file_path",
    "get_logger",
    # Progress
    "pluralize",
    "status",
]
