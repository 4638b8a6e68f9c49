"""Cobertura XML format parser.

Cobertura XML is written by cobertura-maven-plugin, coverage.py, coverlet
and several exporters. Line hits are real execution counts.

Structure:
<coverage line-rate="0.85" ...>
  <sources>
    <source>/abs/project/src/main/java</source>
  </sources>
  <packages>
    <package name="...">
      <classes>
        <class name="..." filename="org/example/Foo.java">
          <lines>
            <line number="1" hits="1"/>
          </lines>
        </class>
      </classes>
    </package>
  </packages>
</coverage>

A file may appear in several <class> elements (inner and anonymous classes).
Those are combined into one record per file, taking the maximum hits per
line, and emitted in order of first appearance.
"""

from collections.abc import Iterator, Mapping
from pathlib import Path, PurePath

from covreport.core.errors import ProcessingError
from covreport.parsers.base import ReportParser, SourceResolution
from covreport.source.loader import SourceLoader


class CoberturaParser(ReportParser):
    """Parser for Cobertura XML reports."""

    format_id = "cobertura"

    def __init__(
        self,
        report_path: Path,
        source_loader: SourceLoader,
        *,
        resolution: SourceResolution | None = None,
    ) -> None:
        super().__init__(report_path, source_loader, resolution=resolution)
        self._source_roots: list[str] = []

    def _read_report(self) -> Iterator[tuple[str, Mapping[int, int]]]:
        root = self._parse_xml()

        # Strip namespace if present
        for elem in root.iter():
            if "}" in elem.tag:
                elem.tag = elem.tag.split("}", 1)[1]

        if root.tag != "coverage":
            raise ProcessingError.report_unreadable(
                str(self.report_path), f"expected <coverage> root, found <{root.tag}>"
            )

        self._source_roots = [
            (source.text or "").strip() for source in root.findall("./sources/source")
        ]
        self._source_roots = [r for r in self._source_roots if r]

        files: dict[str, dict[int, int]] = {}
        for cls in root.iter("class"):
            filename = cls.get("filename", "")
            if not filename:
                continue
            lines = files.setdefault(filename, {})

            # Class-level lines only; method-level lines repeat them
            for line in cls.findall("./lines/line"):
                try:
                    number = int(line.get("number", "0"))
                    hits = int(line.get("hits", "0"))
                except ValueError as e:
                    raise ProcessingError.report_unreadable(
                        str(self.report_path), f"bad line data in {filename}: {e}"
                    ) from e
                if number > 0:
                    lines[number] = max(lines.get(number, 0), hits)

        yield from files.items()

    def _source_candidates(self, name: str) -> list[str]:
        """The report's own <sources> roots first, then the bare name."""
        if PurePath(name).is_absolute():
            return [name]
        return [*(str(PurePath(root) / name) for root in self._source_roots), name]
