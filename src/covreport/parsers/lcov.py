"""LCOV format parser.

LCOV format is a plain text format with records like:
- TN:<test name>
- SF:<source file path>
- DA:<line>,<hit count>[,<checksum>]
- end_of_record

Branch and function records (BRDA, FN, FNDA, ...) carry nothing the payload
needs and are ignored. A tracefile may hold several records for the same
file (one per test name); their hits are summed.

Used by: gcov/lcov, cargo-llvm-cov, istanbul/nyc, pytest-cov, dart test
"""

from collections.abc import Iterator, Mapping

from covreport.core.errors import ProcessingError
from covreport.parsers.base import ReportParser


class LcovParser(ReportParser):
    """Parser for LCOV tracefiles."""

    format_id = "lcov"

    def _read_report(self) -> Iterator[tuple[str, Mapping[int, int]]]:
        try:
            content = self.report_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ProcessingError.report_unreadable(str(self.report_path), str(e)) from e

        files: dict[str, dict[int, int]] = {}
        current: dict[int, int] | None = None

        for lineno, raw in enumerate(content.splitlines(), start=1):
            line = raw.strip()
            if not line:
                continue

            if line.startswith("SF:"):
                current = files.setdefault(line[3:], {})

            elif line.startswith("DA:"):
                if current is None:
                    raise ProcessingError.report_unreadable(
                        str(self.report_path), f"line {lineno}: DA record outside SF record"
                    )
                parts = line[3:].split(",")
                if len(parts) < 2:
                    raise ProcessingError.report_unreadable(
                        str(self.report_path), f"line {lineno}: malformed DA record"
                    )
                try:
                    number = int(parts[0])
                    # Some tools write '-' for lines that never ran
                    hits = 0 if parts[1] == "-" else int(parts[1])
                except ValueError as e:
                    raise ProcessingError.report_unreadable(
                        str(self.report_path), f"line {lineno}: {e}"
                    ) from e
                if number > 0:
                    current[number] = current.get(number, 0) + max(hits, 0)

            elif line == "end_of_record":
                current = None

        yield from files.items()
