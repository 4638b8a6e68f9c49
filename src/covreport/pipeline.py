"""Report run orchestration.

One run, strictly sequential:

1. Build the job from resolved configuration and validate it
2. Create the source loader and one parser per discovered report
3. Create the payload writer and the callback chain in front of it
4. Run every parser, in factory order, into the chain
5. Close the payload and, unless this is a dry run, submit it

Any failure aborts the run. The payload file handle is released on every
path, but a payload from a failed run is never submitted.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

import structlog

from covreport.config.models import CovReportConfig, DuplicatePolicy, JobConfig
from covreport.core.errors import IOFailure, ProcessingError
from covreport.core.logging import level_number
from covreport.domain.git import Git
from covreport.domain.job import Job
from covreport.parsers.base import CoverageParser
from covreport.parsers.factory import CoverageParsersFactory
from covreport.payload.writer import JsonWriter
from covreport.reporting.loggers import (
    CoverageTracingLogger,
    DryRunLogger,
    JobLogger,
    Position,
    Reporter,
)
from covreport.source.callback import SeenSources, SourceCallback, UniqueSourceCallback
from covreport.source.loader import SourceLoader, create_source_loader
from covreport.submission.client import CoverallsClient, CoverallsResponse

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RunResult:
    """What a run produced."""

    coveralls_file: Path | None
    run_id: str = ""
    source_files: int = 0
    dry_run: bool = False
    skipped: bool = False
    response: CoverallsResponse | None = None

    @property
    def submitted(self) -> bool:
        return self.response is not None


def create_job(config: JobConfig, git: Git | None = None) -> Job:
    return (
        Job()
        .with_repo_token(config.repo_token)
        .with_service_name(config.service_name)
        .with_service_job_id(config.service_job_id)
        .with_service_build_number(config.service_build_number)
        .with_service_build_url(config.service_build_url)
        .with_service_environment(config.service_environment)
        .with_timestamp(config.timestamp)
        .with_dry_run(config.dry_run)
        .with_branch(config.branch)
        .with_pull_request(config.pull_request)
        .with_git(git)
    )


def create_source_loader_for(config: CovReportConfig, project_dir: Path) -> SourceLoader:
    return create_source_loader(
        project_dir,
        modules=config.reports.modules,
        source_directories=config.sources.directories,
        encoding=config.sources.encoding,
        scan=config.sources.scan,
    )


def create_coverage_parsers(
    config: CovReportConfig, project_dir: Path, source_loader: SourceLoader
) -> list[CoverageParser]:
    reports = config.reports
    return (
        CoverageParsersFactory(
            project_dir,
            source_loader,
            modules=reports.modules,
            build_dir=reports.build_dir,
            reporting_dir=reports.reporting_dir,
        )
        .with_jacoco_reports(reports.jacoco)
        .with_cobertura_reports(reports.cobertura)
        .with_saga_reports(reports.saga)
        .with_lcov_reports(reports.lcov)
        .with_relative_report_dirs(reports.relative_dirs)
        .create_parsers()
    )


def create_source_callback_chain(
    writer: JsonWriter,
    reporters: list[Reporter],
    *,
    tracing: bool = True,
    seen: SeenSources | None = None,
    duplicates: DuplicatePolicy = "first-wins",
) -> SourceCallback:
    """Build dedup -> tracing (optional) -> writer.

    A tracing stage is appended to ``reporters`` so it can report totals.
    """
    chain: SourceCallback = writer
    if tracing:
        tracer = CoverageTracingLogger(chain)
        reporters.append(tracer)
        chain = tracer
    return UniqueSourceCallback(chain, seen=seen, duplicates=duplicates)


def report(reporters: Sequence[Reporter], position: Position) -> None:
    for reporter in reporters:
        if reporter.position is position:
            reporter.log(log)


def write_coveralls(
    writer: JsonWriter,
    callback: SourceCallback,
    parsers: Sequence[CoverageParser],
) -> None:
    """Run every parser into the chain, always closing the writer."""
    try:
        log.info("writing_coveralls_data", path=str(writer.coveralls_file.resolve()))
        start = time.perf_counter()
        writer.write_start()
        for parser in parsers:
            log.info(
                "processing_report",
                format=parser.format_id,
                path=str(parser.report_path.resolve()),
            )
            parser.parse(callback)
        writer.write_end()
        duration_ms = int((time.perf_counter() - start) * 1000)
        log.info("coveralls_data_written", duration_ms=duration_ms, sources=writer.source_count)
    finally:
        writer.close()


def submit_data(client: CoverallsClient, coveralls_file: Path) -> CoverallsResponse:
    log.info("submitting_coveralls_data", url=client.url)
    start = time.perf_counter()
    try:
        response = client.submit(coveralls_file)
    except ProcessingError:
        duration_ms = int((time.perf_counter() - start) * 1000)
        log.error(
            "submission_failed",
            message=f"Submission failed in {duration_ms}ms while processing data",
        )
        raise
    except IOFailure:
        duration_ms = int((time.perf_counter() - start) * 1000)
        log.error(
            "submission_failed",
            message=f"Submission failed in {duration_ms}ms while handling I/O operations",
        )
        raise

    duration_ms = int((time.perf_counter() - start) * 1000)
    log.info(
        "coveralls_data_submitted",
        duration_ms=duration_ms,
        message=response.message,
        url=response.url,
    )
    log.info(
        "coverage_update_pending",
        message="It might take hours for Coveralls to update the actual coverage numbers "
        "for a job. If you see question marks in the report, please be patient.",
    )
    return response


def run_report(
    config: CovReportConfig,
    project_dir: Path,
    *,
    git: Git | None = None,
    client: CoverallsClient | None = None,
    seen: SeenSources | None = None,
) -> RunResult:
    """Execute one report run.

    Every event logged during the run carries the same ``run_id``.

    Raises:
        JobValidationError: The job cannot be attributed to a build.
        ProcessingError: Reports, sources or the service response are bad.
        IOFailure: A file or network operation failed.
        InternalError: The writer was driven out of order.
    """
    run_id = uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(run_id=run_id):
        return _run(config, project_dir, run_id, git=git, client=client, seen=seen)


def _run(
    config: CovReportConfig,
    project_dir: Path,
    run_id: str,
    *,
    git: Git | None,
    client: CoverallsClient | None,
    seen: SeenSources | None,
) -> RunResult:
    if config.job.skip:
        log.info("skip_set", message="Skip property set, skipping execution")
        return RunResult(coveralls_file=None, run_id=run_id, skipped=True)

    job = create_job(config.job, git)
    job.validate().throw_or_inform(log)

    source_loader = create_source_loader_for(config, project_dir)
    parsers = create_coverage_parsers(config, project_dir, source_loader)

    coveralls_file = Path(config.output.coveralls_file)
    if not coveralls_file.is_absolute():
        coveralls_file = project_dir / coveralls_file
    writer = JsonWriter(job, coveralls_file)

    if client is None:
        client = CoverallsClient(config.submission.url, timeout=config.submission.timeout_sec)

    reporters: list[Reporter] = [JobLogger(job)]
    callback = create_source_callback_chain(
        writer,
        reporters,
        tracing=level_number(config.logging.level) <= logging.INFO,
        seen=seen,
        duplicates=config.dedup.duplicates,
    )
    reporters.append(DryRunLogger(job.dry_run, writer.coveralls_file))

    report(reporters, Position.BEFORE)
    write_coveralls(writer, callback, parsers)
    report(reporters, Position.AFTER)

    response = None
    if not job.dry_run:
        response = submit_data(client, writer.coveralls_file)

    return RunResult(
        coveralls_file=writer.coveralls_file,
        run_id=run_id,
        source_files=writer.source_count,
        dry_run=job.dry_run,
        response=response,
    )
