"""covreport error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Job validation
- 4xxx: Data processing (reports, sources, service responses)
- 5xxx: I/O (local files, network)
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Job validation (3xxx)
    JOB_VALIDATION_FAILED = 3001

    # Processing (4xxx)
    REPORT_NOT_FOUND = 4001
    REPORT_UNREADABLE = 4002
    NO_REPORTS_FOUND = 4003
    SOURCE_NOT_FOUND = 4004
    LINE_OUT_OF_RANGE = 4005
    CONFLICTING_DUPLICATE = 4006
    RESPONSE_INVALID = 4007
    SUBMISSION_REJECTED = 4008
    GIT_SNAPSHOT_INVALID = 4009
    SOURCE_UNDECODABLE = 4010

    # I/O (5xxx)
    IO_FILE = 5001
    IO_CONNECT = 5002
    IO_TIMEOUT = 5003
    IO_TRANSFER = 5004

    # Internal (9xxx)
    INTERNAL_ERROR = 9001
    INTERNAL_LIFECYCLE = 9003


@dataclass(eq=False)
class CovReportError(Exception):
    """Base error with structured context.

    Not frozen: contextlib and the traceback machinery assign attributes such
    as ``__traceback__`` on exceptions passing through them.
    """

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'REPORT_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CovReportError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class JobValidationError(CovReportError):
    """Job metadata cannot be attributed to a build."""

    @classmethod
    def from_messages(cls, messages: list[str]) -> "JobValidationError":
        return cls(
            code=ErrorCode.JOB_VALIDATION_FAILED,
            message="Invalid job configuration: " + "; ".join(messages),
            details={"errors": list(messages)},
        )


class ProcessingError(CovReportError):
    """Input or output data could not be processed."""

    @classmethod
    def report_not_found(cls, path: str) -> "ProcessingError":
        return cls(
            code=ErrorCode.REPORT_NOT_FOUND,
            message=f"Coverage report not found: {path}",
            details={"path": path},
        )

    @classmethod
    def report_unreadable(cls, path: str, reason: str) -> "ProcessingError":
        return cls(
            code=ErrorCode.REPORT_UNREADABLE,
            message=f"Failed to read coverage report {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def no_reports(cls) -> "ProcessingError":
        return cls(
            code=ErrorCode.NO_REPORTS_FOUND,
            message="No coverage report files found",
        )

    @classmethod
    def line_out_of_range(cls, name: str, line: int, size: int) -> "ProcessingError":
        return cls(
            code=ErrorCode.LINE_OUT_OF_RANGE,
            message=f"Line number {line} is greater than the source file {name} size ({size})",
            details={"name": name, "line": line, "size": size},
        )

    @classmethod
    def conflicting_duplicate(cls, name: str) -> "ProcessingError":
        return cls(
            code=ErrorCode.CONFLICTING_DUPLICATE,
            message=f"Conflicting coverage for {name} found in more than one report",
            details={"name": name},
        )

    @classmethod
    def invalid_response(cls, status_code: int, reason: str, detail: str) -> "ProcessingError":
        return cls(
            code=ErrorCode.RESPONSE_INVALID,
            message=(
                f"Report submission to Coveralls API failed with HTTP status "
                f"{status_code}: {reason} ({detail})"
            ),
            details={"status_code": status_code, "reason": reason},
        )

    @classmethod
    def rejected(cls, status_code: int, reason: str, detail: str) -> "ProcessingError":
        return cls(
            code=ErrorCode.SUBMISSION_REJECTED,
            message=(
                f"Report submission to Coveralls API failed with HTTP status "
                f"{status_code}: {reason} ({detail})"
            ),
            details={"status_code": status_code, "reason": reason},
        )

    @classmethod
    def source_undecodable(cls, name: str, encoding: str, reason: str) -> "ProcessingError":
        return cls(
            code=ErrorCode.SOURCE_UNDECODABLE,
            message=f"Cannot decode source {name} as {encoding}: {reason}",
            details={"name": name, "encoding": encoding, "reason": reason},
        )

    @classmethod
    def invalid_git_snapshot(cls, path: str, reason: str) -> "ProcessingError":
        return cls(
            code=ErrorCode.GIT_SNAPSHOT_INVALID,
            message=f"Invalid git snapshot in {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class SourceNotFoundError(ProcessingError):
    """A source file referenced by a report is absent from the source tree."""

    @classmethod
    def for_name(cls, name: str) -> "SourceNotFoundError":
        return cls(
            code=ErrorCode.SOURCE_NOT_FOUND,
            message=f"No source found for {name}",
            details={"name": name},
        )


class IOFailure(CovReportError):
    """A local file or network operation could not complete."""

    @classmethod
    def file(cls, path: str, reason: str) -> "IOFailure":
        return cls(
            code=ErrorCode.IO_FILE,
            message=f"I/O error on {path}: {reason}",
            retryable=True,
            details={"path": path, "reason": reason},
        )

    @classmethod
    def connect(cls, url: str, reason: str) -> "IOFailure":
        return cls(
            code=ErrorCode.IO_CONNECT,
            message=f"Could not connect to {url}: {reason}",
            retryable=True,
            details={"url": url, "reason": reason},
        )

    @classmethod
    def timeout(cls, url: str, reason: str) -> "IOFailure":
        return cls(
            code=ErrorCode.IO_TIMEOUT,
            message=f"Request to {url} timed out: {reason}",
            retryable=True,
            details={"url": url, "reason": reason},
        )

    @classmethod
    def transfer(cls, url: str, reason: str) -> "IOFailure":
        return cls(
            code=ErrorCode.IO_TRANSFER,
            message=f"Transfer to {url} interrupted: {reason}",
            retryable=True,
            details={"url": url, "reason": reason},
        )


class InternalError(CovReportError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )

    @classmethod
    def lifecycle(cls, operation: str, state: str) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_LIFECYCLE,
            message=f"Cannot {operation} while writer is {state}",
            details={"operation": operation, "state": state},
        )
