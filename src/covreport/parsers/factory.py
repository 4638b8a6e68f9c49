"""Report discovery and parser construction.

Parser order is fixed, because the dedup stage keeps the first record it
sees for each source file:

1. Explicitly listed reports: JaCoCo, then Cobertura, then Saga, then LCOV,
   each list in the given order.
2. Convention reports of every module, in module order. Per module the
   default locations come first, then every relative report directory under
   the reporting directory and then under the build directory.

Explicit reports must exist. Convention reports are optional.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

import structlog

from covreport.config.constants import (
    BUILD_DIR_DEFAULT,
    COBERTURA_DIRECTORY,
    COBERTURA_FILE,
    JACOCO_DIRECTORY,
    JACOCO_FILE,
    REPORTING_DIR_DEFAULT,
    SAGA_DIRECTORY,
    SAGA_FILE,
)
from covreport.core.errors import ProcessingError
from covreport.parsers.base import CoverageParser, ReportParser
from covreport.parsers.cobertura import CoberturaParser
from covreport.parsers.jacoco import JacocoParser
from covreport.parsers.lcov import LcovParser
from covreport.parsers.saga import SagaParser
from covreport.source.loader import SourceLoader

log = structlog.get_logger(__name__)

PARSER_BY_FORMAT: dict[str, type[ReportParser]] = {
    p.format_id: p for p in (JacocoParser, CoberturaParser, SagaParser, LcovParser)
}


def create_parser(format_id: str, report: Path, source_loader: SourceLoader) -> CoverageParser:
    """Instantiate the parser registered for a format.

    Raises:
        ProcessingError: If the format is unknown.
    """
    parser_cls = PARSER_BY_FORMAT.get(format_id)
    if parser_cls is None:
        valid = ", ".join(sorted(PARSER_BY_FORMAT))
        raise ProcessingError.report_unreadable(
            str(report), f"unknown coverage format {format_id!r}; valid formats: {valid}"
        )
    return parser_cls(report, source_loader)


class CoverageParsersFactory:
    """Collects report files and creates one parser per file.

    Example::

        parsers = (
            CoverageParsersFactory(project_dir, loader, modules=["core", "web"])
            .with_jacoco_reports([Path("build/jacoco.xml")])
            .with_relative_report_dirs(["it"])
            .create_parsers()
        )
    """

    def __init__(
        self,
        project_dir: Path,
        source_loader: SourceLoader,
        *,
        modules: Sequence[str] = (".",),
        build_dir: str = BUILD_DIR_DEFAULT,
        reporting_dir: str = REPORTING_DIR_DEFAULT,
    ) -> None:
        self.project_dir = project_dir
        self.source_loader = source_loader
        self.modules = list(modules)
        self.build_dir = build_dir
        self.reporting_dir = reporting_dir
        self._explicit: dict[str, list[Path]] = {fmt: [] for fmt in PARSER_BY_FORMAT}
        self._relative_report_dirs: list[str] = []

    def with_jacoco_reports(self, reports: Iterable[Path | str] | None) -> CoverageParsersFactory:
        return self._with_reports("jacoco", reports)

    def with_cobertura_reports(
        self, reports: Iterable[Path | str] | None
    ) -> CoverageParsersFactory:
        return self._with_reports("cobertura", reports)

    def with_saga_reports(self, reports: Iterable[Path | str] | None) -> CoverageParsersFactory:
        return self._with_reports("saga", reports)

    def with_lcov_reports(self, reports: Iterable[Path | str] | None) -> CoverageParsersFactory:
        return self._with_reports("lcov", reports)

    def with_relative_report_dirs(self, dirs: Iterable[str] | None) -> CoverageParsersFactory:
        self._relative_report_dirs.extend(dirs or [])
        return self

    def _with_reports(
        self, format_id: str, reports: Iterable[Path | str] | None
    ) -> CoverageParsersFactory:
        self._explicit[format_id].extend(self._absolute(Path(r)) for r in reports or [])
        return self

    def _absolute(self, path: Path) -> Path:
        return path if path.is_absolute() else self.project_dir / path

    def create_parsers(self) -> list[CoverageParser]:
        """Create parsers for every discovered report, in deterministic order.

        Raises:
            ProcessingError: If an explicit report is missing or unreadable,
                or no report was found at all.
        """
        reports: list[tuple[str, Path]] = []

        for format_id in ("jacoco", "cobertura", "saga", "lcov"):
            for path in self._explicit[format_id]:
                if not path.is_file():
                    raise ProcessingError.report_not_found(str(path))
                reports.append((format_id, path))

        for module in self.modules:
            reports.extend(
                (format_id, path)
                for format_id, path in self._convention_reports(module)
                if path.is_file()
            )

        unique: list[tuple[str, Path]] = []
        seen: set[Path] = set()
        for format_id, path in reports:
            key = path.resolve()
            if key in seen:
                continue
            seen.add(key)
            unique.append((format_id, path))

        if not unique:
            raise ProcessingError.no_reports()

        parsers = [create_parser(fmt, path, self.source_loader) for fmt, path in unique]
        log.debug("parsers_created", reports=[f"{fmt}:{path}" for fmt, path in unique])
        return parsers

    def _convention_reports(self, module: str) -> list[tuple[str, Path]]:
        module_dir = self._absolute(Path(module))
        reporting = module_dir / self.reporting_dir
        build = module_dir / self.build_dir

        candidates = [
            ("jacoco", reporting / JACOCO_DIRECTORY / JACOCO_FILE),
            ("cobertura", reporting / COBERTURA_DIRECTORY / COBERTURA_FILE),
            ("saga", build / SAGA_DIRECTORY / SAGA_FILE),
        ]
        for rel in self._relative_report_dirs:
            for base in (reporting / rel, build / rel):
                candidates.extend(
                    [
                        ("jacoco", base / JACOCO_FILE),
                        ("cobertura", base / COBERTURA_FILE),
                        ("saga", base / SAGA_FILE),
                    ]
                )
        return candidates
