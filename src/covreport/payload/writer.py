"""Streaming Coveralls payload writer.

The payload is written incrementally: the job header on ``write_start``,
one ``source_files`` element per accepted record, and the closing brackets
on ``write_end``. Only the record being written is held in memory.

Lifecycle::

    NEW --write_start--> STARTED --write_end--> ENDED --close--> CLOSED

``close`` is valid from any state and idempotent; every other call out of
order raises InternalError. A writer closed before ``write_end`` leaves an
incomplete file that must not be submitted.
"""

from __future__ import annotations

import json
from enum import StrEnum
from pathlib import Path
from types import TracebackType
from typing import IO, TYPE_CHECKING, Any

import structlog

from covreport.config.constants import RUN_AT_FORMAT
from covreport.core.errors import InternalError, IOFailure

if TYPE_CHECKING:
    from covreport.domain.job import Job
    from covreport.domain.source import SourceFile

log = structlog.get_logger(__name__)


class WriterState(StrEnum):
    NEW = "new"
    STARTED = "started"
    ENDED = "ended"
    CLOSED = "closed"


def job_fields(job: Job) -> dict[str, Any]:
    """Top-level payload fields for a job, in output order. Unset fields are omitted."""
    fields: dict[str, Any] = {}
    for key, value in (
        ("repo_token", job.repo_token),
        ("service_name", job.service_name),
        ("service_job_id", job.service_job_id),
        ("service_number", job.service_build_number),
        ("service_build_url", job.service_build_url),
        ("service_branch", job.effective_branch),
        ("service_pull_request", job.pull_request),
    ):
        if value:
            fields[key] = value
    if job.timestamp is not None:
        timestamp = job.timestamp
        if timestamp.tzinfo is None:
            timestamp = timestamp.astimezone()
        fields["run_at"] = timestamp.strftime(RUN_AT_FORMAT)
    if job.service_environment:
        fields["environment"] = dict(job.service_environment)
    if job.git is not None:
        fields["git"] = job.git.to_dict()
    return fields


class JsonWriter:
    """Writes the payload for one job; the terminal stage of the callback chain."""

    def __init__(self, job: Job, coveralls_file: Path) -> None:
        self.job = job
        self._coveralls_file = coveralls_file
        self._handle: IO[str] | None = None
        self._state = WriterState.NEW
        self._count = 0

    @property
    def coveralls_file(self) -> Path:
        return self._coveralls_file

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def source_count(self) -> int:
        """Records written so far."""
        return self._count

    def _require(self, operation: str, expected: WriterState) -> IO[str]:
        if self._state is not expected or self._handle is None:
            raise InternalError.lifecycle(operation, self._state.value)
        return self._handle

    def _write(self, handle: IO[str], text: str) -> None:
        try:
            handle.write(text)
        except OSError as e:
            raise IOFailure.file(str(self._coveralls_file), str(e)) from e

    def write_start(self) -> None:
        """Open the payload file and write the job header.

        Raises:
            InternalError: If the writer was already started or closed.
            IOFailure: If the file cannot be created or written.
        """
        if self._state is not WriterState.NEW:
            raise InternalError.lifecycle("write start", self._state.value)
        try:
            self._coveralls_file.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self._coveralls_file.open("w", encoding="utf-8")
        except OSError as e:
            raise IOFailure.file(str(self._coveralls_file), str(e)) from e
        self._state = WriterState.STARTED

        parts = [
            f"{json.dumps(key)}:{json.dumps(value, ensure_ascii=False)},"
            for key, value in job_fields(self.job).items()
        ]
        self._write(self._handle, "{" + "".join(parts) + '"source_files":[')
        log.debug("payload_started", path=str(self._coveralls_file))

    def on_source(self, source: SourceFile) -> None:
        handle = self._require("write source", WriterState.STARTED)
        prefix = "," if self._count else ""
        self._write(handle, prefix + json.dumps(source.to_payload(), ensure_ascii=False))
        self._count += 1

    def write_end(self) -> None:
        """Close the source file array and the top-level object."""
        handle = self._require("write end", WriterState.STARTED)
        self._write(handle, "]}")
        try:
            handle.flush()
        except OSError as e:
            raise IOFailure.file(str(self._coveralls_file), str(e)) from e
        self._state = WriterState.ENDED
        log.debug("payload_ended", path=str(self._coveralls_file), sources=self._count)

    def close(self) -> None:
        """Release the file handle. Safe to call repeatedly and on error paths."""
        handle, self._handle = self._handle, None
        self._state = WriterState.CLOSED
        if handle is not None:
            try:
                handle.close()
            except OSError as e:
                raise IOFailure.file(str(self._coveralls_file), str(e)) from e

    def __enter__(self) -> JsonWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
