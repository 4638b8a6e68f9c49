"""Job validation with two severities.

Errors mean the payload could not be attributed to any build and abort the
run. Warnings describe best-effort metadata and are only logged.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from covreport.core.errors import JobValidationError

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from covreport.domain.job import Job


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    severity: Severity
    message: str


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating a job."""

    issues: tuple[ValidationIssue, ...] = ()

    @property
    def errors(self) -> list[str]:
        return [i.message for i in self.issues if i.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[str]:
        return [i.message for i in self.issues if i.severity is Severity.WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    def throw_or_inform(self, log: BoundLogger) -> None:
        """Raise on any error, otherwise log every warning.

        Raises:
            JobValidationError: If at least one issue is an error.
        """
        errors = self.errors
        if errors:
            raise JobValidationError.from_messages(errors)
        for message in self.warnings:
            log.warning("job_validation_warning", message=message)


def _has_value(value: str | None) -> bool:
    return value is not None and value.strip() != ""


class JobValidator:
    """Checks that a job identifies exactly one CI build."""

    def __init__(self, job: Job) -> None:
        self._job = job

    def validate(self) -> ValidationResult:
        issues = [*self._identity(), *self._git()]
        return ValidationResult(issues=tuple(issues))

    def _identity(self) -> list[ValidationIssue]:
        job = self._job
        if _has_value(job.repo_token):
            return []
        if _has_value(job.service_name) and (
            _has_value(job.service_job_id)
            or _has_value(job.service_build_number)
            or _has_value(job.pull_request)
        ):
            return []
        severity = Severity.WARNING if job.dry_run else Severity.ERROR
        return [
            ValidationIssue(
                severity,
                "Either repository token or service with job id, build number "
                "or pull request must be defined",
            )
        ]

    def _git(self) -> list[ValidationIssue]:
        job = self._job
        issues: list[ValidationIssue] = []
        if job.git is not None and not _has_value(job.git.head.id):
            issues.append(ValidationIssue(Severity.ERROR, "Git commit id is missing"))
        if not _has_value(job.effective_branch):
            issues.append(ValidationIssue(Severity.WARNING, "Git branch is missing"))
        return issues
