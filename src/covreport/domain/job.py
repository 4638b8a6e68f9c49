"""Build submission metadata."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType

from covreport.domain.git import Git
from covreport.domain.validation import JobValidator, ValidationResult


@dataclass(frozen=True, slots=True)
class Job:
    """Identity of one CI build plus the VCS snapshot it ran on.

    Immutable: every ``with_*`` call returns a new job, so a validated job
    can be handed to the rest of the pipeline without copying.

    Example::

        job = (
            Job()
            .with_service_name("jenkins")
            .with_service_job_id("42")
            .with_dry_run(True)
        )
        job.validate().throw_or_inform(log)
    """

    repo_token: str | None = None
    service_name: str | None = None
    service_job_id: str | None = None
    service_build_number: str | None = None
    service_build_url: str | None = None
    service_environment: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    branch: str | None = None
    pull_request: str | None = None
    timestamp: datetime | None = None
    dry_run: bool = False
    git: Git | None = None

    def with_repo_token(self, repo_token: str | None) -> Job:
        return replace(self, repo_token=repo_token)

    def with_service_name(self, service_name: str | None) -> Job:
        return replace(self, service_name=service_name)

    def with_service_job_id(self, service_job_id: str | None) -> Job:
        return replace(self, service_job_id=service_job_id)

    def with_service_build_number(self, service_build_number: str | None) -> Job:
        return replace(self, service_build_number=service_build_number)

    def with_service_build_url(self, service_build_url: str | None) -> Job:
        return replace(self, service_build_url=service_build_url)

    def with_service_environment(self, environment: Mapping[str, str] | None) -> Job:
        return replace(self, service_environment=MappingProxyType(dict(environment or {})))

    def with_branch(self, branch: str | None) -> Job:
        return replace(self, branch=branch)

    def with_pull_request(self, pull_request: str | None) -> Job:
        return replace(self, pull_request=pull_request)

    def with_timestamp(self, timestamp: datetime | None) -> Job:
        return replace(self, timestamp=timestamp)

    def with_dry_run(self, dry_run: bool) -> Job:
        return replace(self, dry_run=dry_run)

    def with_git(self, git: Git | None) -> Job:
        return replace(self, git=git)

    @property
    def effective_branch(self) -> str | None:
        """Explicit branch, falling back to the snapshot's branch."""
        if self.branch:
            return self.branch
        return self.git.branch if self.git is not None else None

    def validate(self) -> ValidationResult:
        return JobValidator(self).validate()
