"""Coverage parser protocol and shared report handling."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from enum import StrEnum
from pathlib import Path
from typing import ClassVar, Protocol

import structlog

from covreport.core.errors import ProcessingError, SourceNotFoundError
from covreport.domain.source import SourceFile
from covreport.source.callback import SourceCallback
from covreport.source.loader import SourceLoader

log = structlog.get_logger(__name__)


class SourceResolution(StrEnum):
    """What a parser does when a report names a file the loader cannot find."""

    STRICT = "strict"  # fail the run
    LENIENT = "lenient"  # skip the file with a warning


class CoverageParser(Protocol):
    """Protocol for coverage format parsers.

    Each parser reads one report file and emits one complete SourceFile per
    covered source file. Parsers never deduplicate across reports; that is
    the callback chain's job.
    """

    @property
    def format_id(self) -> str:
        """Format identifier (e.g., 'jacoco', 'cobertura')."""
        ...

    @property
    def report_path(self) -> Path:
        """The report file this parser reads."""
        ...

    def parse(self, callback: SourceCallback) -> None:
        """Read the whole report and pass every record to the callback.

        Raises:
            ProcessingError: If the report is missing or corrupt, or a source
                cannot be resolved under strict resolution.
        """
        ...


class ReportParser(ABC):
    """Base for parsers: report checks, source loading and emission.

    Subclasses only implement ``_read_report``, yielding each source name as
    the report spells it with its 1-based line → hit count mapping.
    """

    format_id: ClassVar[str]
    default_resolution: ClassVar[SourceResolution] = SourceResolution.STRICT

    def __init__(
        self,
        report_path: Path,
        source_loader: SourceLoader,
        *,
        resolution: SourceResolution | None = None,
    ) -> None:
        self._report_path = report_path
        self.source_loader = source_loader
        self.resolution = resolution or self.default_resolution

    @property
    def report_path(self) -> Path:
        return self._report_path

    def parse(self, callback: SourceCallback) -> None:
        if not self._report_path.is_file():
            raise ProcessingError.report_not_found(str(self._report_path))

        emitted = skipped = 0
        for name, hits in self._read_report():
            record = self._build_record(name, hits)
            if record is None:
                skipped += 1
                continue
            callback.on_source(record)
            emitted += 1

        log.debug(
            "report_parsed",
            format=self.format_id,
            report=str(self._report_path),
            emitted=emitted,
            skipped=skipped,
        )

    @abstractmethod
    def _read_report(self) -> Iterator[tuple[str, Mapping[int, int]]]: ...

    def _source_candidates(self, name: str) -> list[str]:
        """Names to try with the loader, in order."""
        return [name]

    def _build_record(self, name: str, hits: Mapping[int, int]) -> SourceFile | None:
        for candidate in self._source_candidates(name):
            try:
                loaded = self.source_loader.load(candidate)
            except SourceNotFoundError:
                continue
            return SourceFile.from_hits(loaded.name, loaded.text, hits, encoding=loaded.encoding)

        if self.resolution is SourceResolution.STRICT:
            raise SourceNotFoundError.for_name(name)
        log.warning(
            "source_not_found_skipped",
            name=name,
            format=self.format_id,
            report=str(self._report_path),
        )
        return None

    def _parse_xml(self) -> ET.Element:
        try:
            return ET.parse(self._report_path).getroot()
        except ET.ParseError as e:
            raise ProcessingError.report_unreadable(
                str(self._report_path), f"invalid XML: {e}"
            ) from e
        except OSError as e:
            raise ProcessingError.report_unreadable(str(self._report_path), str(e)) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._report_path})"
