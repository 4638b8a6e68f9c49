"""Tests for the LCOV tracefile parser."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from covreport.core.errors import ErrorCode, ProcessingError
from covreport.domain.source import SourceFile
from covreport.parsers.lcov import LcovParser
from covreport.source.loader import create_source_loader

if TYPE_CHECKING:
    from conftest import ProjectBuilder


class Collector:
    def __init__(self) -> None:
        self.records: list[SourceFile] = []

    def on_source(self, source: SourceFile) -> None:
        self.records.append(source)


class TestLcovParser:
    def test_da_records_become_coverage(self, project: ProjectBuilder) -> None:
        # Given
        project.source("lib/a.js", 4)
        report = project.lcov("coverage/lcov.info", {"lib/a.js": {1: 2, 2: 0, 4: 7}})
        sink = Collector()

        # When
        LcovParser(report, create_source_loader(project.root)).parse(sink)

        # Then
        assert sink.records[0].name == "lib/a.js"
        assert sink.records[0].coverage == [2, 0, None, 7]

    def test_absolute_sf_path_with_default_loader(self, project: ProjectBuilder) -> None:
        source = project.source("lib/a.js", 1)
        report = project.lcov("lcov.info", {str(source): {1: 1}})
        sink = Collector()

        LcovParser(report, create_source_loader(project.root)).parse(sink)

        assert sink.records[0].name == "lib/a.js"

    def test_repeated_records_for_one_file_summed(self, project: ProjectBuilder) -> None:
        """Test runners append one record per test target to the same tracefile."""
        project.source("a.js", 2)
        report = project.file(
            "lcov.info",
            "SF:a.js\nDA:1,1\nend_of_record\nSF:a.js\nDA:1,2\nDA:2,0\nend_of_record\n",
        )
        sink = Collector()

        LcovParser(report, create_source_loader(project.root)).parse(sink)

        assert len(sink.records) == 1
        assert sink.records[0].coverage == [3, 0]

    def test_dash_hit_count_means_not_run(self, project: ProjectBuilder) -> None:
        project.source("a.js", 1)
        report = project.file("lcov.info", "SF:a.js\nDA:1,-\nend_of_record\n")
        sink = Collector()

        LcovParser(report, create_source_loader(project.root)).parse(sink)

        assert sink.records[0].coverage == [0]

    def test_checksum_field_ignored(self, project: ProjectBuilder) -> None:
        project.source("a.js", 1)
        report = project.file("lcov.info", "SF:a.js\nDA:1,4,abc123\nLH:1\nLF:1\nend_of_record\n")
        sink = Collector()

        LcovParser(report, create_source_loader(project.root)).parse(sink)

        assert sink.records[0].coverage == [4]

    @pytest.mark.parametrize(
        "content",
        [
            "DA:1,1\n",
            "SF:a.js\nDA:1\nend_of_record\n",
            "SF:a.js\nDA:one,1\nend_of_record\n",
        ],
    )
    def test_malformed_tracefile_unreadable(self, project: ProjectBuilder, content: str) -> None:
        project.source("a.js", 1)
        report = project.file("lcov.info", content)

        with pytest.raises(ProcessingError) as exc_info:
            LcovParser(report, create_source_loader(project.root)).parse(Collector())

        assert exc_info.value.code is ErrorCode.REPORT_UNREADABLE
