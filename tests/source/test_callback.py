"""Tests for the dedup stage of the callback chain."""

from __future__ import annotations

import pytest

from covreport.core.errors import ErrorCode, ProcessingError
from covreport.domain.source import SourceFile
from covreport.source import callback as callback_module
from covreport.source.callback import SeenSources, UniqueSourceCallback


class Collector:
    def __init__(self) -> None:
        self.records: list[SourceFile] = []

    def on_source(self, source: SourceFile) -> None:
        self.records.append(source)


def _record(name: str, hits: dict[int, int], text: str = "a\nb\nc") -> SourceFile:
    return SourceFile.from_hits(name, text, hits)


class TestUniqueSourceCallback:
    """First record per source file wins."""

    def test_first_record_forwarded_later_dropped(self) -> None:
        # Given
        sink = Collector()
        callback = UniqueSourceCallback(sink)
        first = _record("src/A.java", {1: 1})
        second = _record("src/A.java", {1: 0, 2: 5})

        # When
        callback.on_source(first)
        callback.on_source(second)

        # Then
        assert sink.records == [first]
        assert callback.dropped == 1

    def test_distinct_names_all_forwarded(self) -> None:
        sink = Collector()
        callback = UniqueSourceCallback(sink)

        callback.on_source(_record("a.py", {1: 1}))
        callback.on_source(_record("b.py", {1: 1}))

        assert [r.name for r in sink.records] == ["a.py", "b.py"]

    def test_hit_counts_not_merged(self) -> None:
        """The dropped record contributes nothing, not even extra lines."""
        sink = Collector()
        callback = UniqueSourceCallback(sink)

        callback.on_source(_record("a.py", {1: 1}))
        callback.on_source(_record("a.py", {2: 9}))

        assert sink.records[0].coverage == [1, None, None]

    def test_strict_fails_on_conflicting_duplicate(self) -> None:
        callback = UniqueSourceCallback(Collector(), duplicates="strict")
        callback.on_source(_record("a.py", {1: 1}))

        with pytest.raises(ProcessingError) as exc_info:
            callback.on_source(_record("a.py", {1: 2}))

        assert exc_info.value.code is ErrorCode.CONFLICTING_DUPLICATE

    def test_strict_compares_record_data_not_hashes(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Records whose hashes collide still conflict when their data differs."""
        # Given
        monkeypatch.setattr(callback_module, "hash", lambda _value: 0, raising=False)
        callback = UniqueSourceCallback(Collector(), duplicates="strict")
        callback.on_source(_record("a.py", {1: 1}))

        # When / Then
        with pytest.raises(ProcessingError):
            callback.on_source(_record("a.py", {1: 0}))

    def test_strict_tolerates_identical_duplicate(self) -> None:
        sink = Collector()
        callback = UniqueSourceCallback(sink, duplicates="strict")

        callback.on_source(_record("a.py", {1: 1}))
        callback.on_source(_record("a.py", {1: 1}))

        assert len(sink.records) == 1
        assert callback.dropped == 1

    def test_seen_set_is_injected_per_run(self) -> None:
        """Each run owns its seen set; separate runs do not share state."""
        # Given
        first_run = SeenSources()
        second_run = SeenSources()
        record = _record("a.py", {1: 1})

        # When
        UniqueSourceCallback(Collector(), seen=first_run).on_source(record)
        sink = Collector()
        UniqueSourceCallback(sink, seen=second_run).on_source(record)

        # Then
        assert "a.py" in first_run
        assert first_run.names == ["a.py"]
        assert sink.records == [record]
        assert len(second_run) == 1
