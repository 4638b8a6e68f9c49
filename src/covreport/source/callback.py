"""Source callback chain.

Every stage that consumes coverage records implements SourceCallback and
forwards to the next stage it wraps::

    UniqueSourceCallback -> CoverageTracingLogger (optional) -> JsonWriter

Deduplication must come first so no later stage, and no payload, ever sees
the same source file twice.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal, Protocol

import structlog

from covreport.core.errors import ProcessingError

if TYPE_CHECKING:
    from covreport.domain.source import SourceFile

log = structlog.get_logger(__name__)


class SourceCallback(Protocol):
    """Receives one complete coverage record per call."""

    def on_source(self, source: SourceFile) -> None: ...


class SeenSources:
    """Source files already accepted during one run.

    Owned by whoever runs the pipeline and handed to the dedup stage, so two
    runs in the same process never share state.
    """

    def __init__(self) -> None:
        self._fingerprints: dict[str, tuple[str, tuple[int | None, ...]]] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._fingerprints

    def __len__(self) -> int:
        return len(self._fingerprints)

    def add(self, source: SourceFile) -> None:
        self._fingerprints[source.name] = _fingerprint(source)

    def matches(self, source: SourceFile) -> bool:
        """True if the accepted record for this name carries the same data."""
        return self._fingerprints.get(source.name) == _fingerprint(source)

    @property
    def names(self) -> list[str]:
        return list(self._fingerprints)


def _fingerprint(source: SourceFile) -> tuple[str, tuple[int | None, ...]]:
    return source.digest, tuple(source.coverage)


class UniqueSourceCallback:
    """Forwards the first record for each source file and drops the rest.

    Later reports covering an already-seen file contribute nothing; hit
    counts are not merged. With ``duplicates="strict"`` a later record whose
    data differs from the accepted one fails the run instead.
    """

    def __init__(
        self,
        delegate: SourceCallback,
        *,
        seen: SeenSources | None = None,
        duplicates: Literal["first-wins", "strict"] = "first-wins",
    ) -> None:
        self.delegate = delegate
        self.seen = seen if seen is not None else SeenSources()
        self.duplicates = duplicates
        self.dropped = 0

    def on_source(self, source: SourceFile) -> None:
        if source.name not in self.seen:
            self.seen.add(source)
            self.delegate.on_source(source)
            return

        if self.duplicates == "strict" and not self.seen.matches(source):
            raise ProcessingError.conflicting_duplicate(source.name)
        self.dropped += 1
        log.debug("duplicate_source_dropped", name=source.name)
