"""Run reporters.

Reporters are observers attached before or after the payload is written.
They only describe the run; removing any of them changes nothing in the
payload.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from covreport.domain.job import Job
    from covreport.domain.source import SourceFile
    from covreport.source.callback import SourceCallback


class Position(StrEnum):
    BEFORE = "before"
    AFTER = "after"


class Reporter(Protocol):
    @property
    def position(self) -> Position: ...

    def log(self, log: BoundLogger) -> None: ...


class JobLogger:
    """Describes the job the payload is attributed to."""

    position = Position.BEFORE

    def __init__(self, job: Job) -> None:
        self.job = job

    def log(self, log: BoundLogger) -> None:
        job = self.job
        log.info(
            "job",
            service_name=job.service_name,
            service_job_id=job.service_job_id,
            service_build_number=job.service_build_number,
            service_build_url=job.service_build_url,
            branch=job.effective_branch,
            pull_request=job.pull_request,
            commit=job.git.head.id if job.git is not None else None,
            repo_token="set" if job.repo_token else "unset",
            dry_run=job.dry_run,
        )


class DryRunLogger:
    """Announces that a dry run keeps the payload local."""

    position = Position.AFTER

    def __init__(self, dry_run: bool, coveralls_file: Path) -> None:
        self.dry_run = dry_run
        self.coveralls_file = coveralls_file

    def log(self, log: BoundLogger) -> None:
        if self.dry_run:
            log.info(
                "dry_run_enabled",
                message="Coveralls report will NOT be submitted to API",
                path=str(self.coveralls_file.resolve()),
            )


class CoverageTracingLogger:
    """Tracing stage of the callback chain.

    Forwards every record unchanged and keeps running totals for the
    end-of-run summary.
    """

    position = Position.AFTER

    def __init__(self, delegate: SourceCallback) -> None:
        self.delegate = delegate
        self.files = 0
        self.lines = 0
        self.relevant = 0
        self.covered = 0

    def on_source(self, source: SourceFile) -> None:
        self.delegate.on_source(source)
        self.files += 1
        self.lines += source.line_count
        self.relevant += source.relevant_lines
        self.covered += source.covered_lines

    @property
    def missed(self) -> int:
        return self.relevant - self.covered

    @property
    def coverage_percent(self) -> float:
        if not self.relevant:
            return 0.0
        return self.covered * 100.0 / self.relevant

    def log(self, log: BoundLogger) -> None:
        log.info(
            "coverage_gathered",
            source_files=self.files,
            lines=self.lines,
            relevant=self.relevant,
            covered=self.covered,
            missed=self.missed,
            coverage=f"{self.coverage_percent:.2f}%",
        )
