"""Per-source-file coverage record.

One record per source file and report: the parser builds it completely from
report data and hands it to the callback chain. Line numbers are 1-based;
``coverage[0]`` is line 1. ``None`` marks a line that is not instrumented.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from covreport.core.errors import ProcessingError

_NEWLINE = re.compile(r"\r\n|\r|\n")


def normalize_newlines(text: str) -> str:
    return _NEWLINE.sub("\n", text)


@dataclass(slots=True)
class SourceFile:
    """Coverage record for a single source file.

    ``source`` is stored with normalized newlines; the number of lines is
    ``source.count("\\n") + 1`` and always equals ``len(coverage)``.
    """

    name: str  # project-relative, POSIX separators
    source: str
    encoding: str = "utf-8"
    coverage: list[int | None] = field(init=False)

    def __post_init__(self) -> None:
        self.source = normalize_newlines(self.source)
        self.coverage = [None] * (self.source.count("\n") + 1)

    @classmethod
    def from_hits(
        cls,
        name: str,
        source: str,
        hits: Mapping[int, int],
        *,
        encoding: str = "utf-8",
    ) -> SourceFile:
        """Build a complete record from a line → hit count mapping."""
        record = cls(name=name, source=source, encoding=encoding)
        for line, count in sorted(hits.items()):
            record.add_coverage(line, count)
        return record

    def add_coverage(self, line: int, hits: int) -> None:
        """Record hits for a 1-based line.

        Raises:
            ProcessingError: If the line is outside the source file.
        """
        if line < 1 or line > len(self.coverage):
            raise ProcessingError.line_out_of_range(self.name, line, len(self.coverage))
        self.coverage[line - 1] = max(hits, 0)

    @property
    def digest(self) -> str:
        """MD5 hex digest of the normalized source text."""
        return hashlib.md5(self.source.encode(self.encoding), usedforsecurity=False).hexdigest()

    @property
    def line_count(self) -> int:
        return len(self.coverage)

    @property
    def relevant_lines(self) -> int:
        """Number of instrumented lines."""
        return sum(1 for hits in self.coverage if hits is not None)

    @property
    def covered_lines(self) -> int:
        """Number of lines hit at least once."""
        return sum(1 for hits in self.coverage if hits)

    def to_payload(self) -> dict[str, object]:
        return {
            "name": self.name,
            "source_digest": self.digest,
            "coverage": list(self.coverage),
        }
