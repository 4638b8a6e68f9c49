"""JaCoCo XML format parser.

JaCoCo is the standard Java coverage tool, used via Maven and Gradle. Only
per-line data from <sourcefile> elements is used; JaCoCo counts
instructions rather than executions, so a line is reported as hit once (1)
when any instruction on it was covered and as 0 otherwise.

Structure:
<report name="...">
  <package name="com/example">
    <class name="com/example/Foo" sourcefilename="Foo.java">...</class>
    <sourcefile name="Foo.java">
      <line nr="1" mi="0" ci="1" mb="0" cb="0"/>
      <line nr="2" mi="1" ci="0" mb="1" cb="1"/>
    </sourcefile>
  </package>
</report>

Source names are ``<package path>/<file name>``, relative to a source root.
"""

from collections.abc import Iterator, Mapping

from covreport.core.errors import ProcessingError
from covreport.parsers.base import ReportParser


class JacocoParser(ReportParser):
    """Parser for JaCoCo XML reports."""

    format_id = "jacoco"

    def _read_report(self) -> Iterator[tuple[str, Mapping[int, int]]]:
        root = self._parse_xml()
        if root.tag != "report":
            raise ProcessingError.report_unreadable(
                str(self.report_path), f"expected <report> root, found <{root.tag}>"
            )

        for package in root.iter("package"):
            package_path = package.get("name", "").strip("/")
            for sourcefile in package.findall("sourcefile"):
                filename = sourcefile.get("name", "")
                if not filename:
                    continue
                name = f"{package_path}/{filename}" if package_path else filename

                lines: dict[int, int] = {}
                for line in sourcefile.findall("line"):
                    try:
                        nr = int(line.get("nr", "0"))
                        ci = int(line.get("ci", "0"))
                    except ValueError as e:
                        raise ProcessingError.report_unreadable(
                            str(self.report_path), f"bad line counter in {name}: {e}"
                        ) from e
                    if nr > 0:
                        lines[nr] = 1 if ci > 0 else 0

                yield name, lines
