"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides a builder for project trees with sources and reports.
"""

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of covreport modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("covreport"):
        del sys.modules[module_name]


def source_text(lines: int) -> str:
    """Source with exactly ``lines`` lines (no trailing newline)."""
    return "\n".join(f"line {i}" for i in range(1, lines + 1))


class ProjectBuilder:
    """Writes sources and coverage reports under a project root."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def file(self, rel: str, content: str) -> Path:
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def source(self, rel: str, lines: int) -> Path:
        return self.file(rel, source_text(lines))

    def cobertura(
        self,
        rel: str,
        files: dict[str, dict[int, int]],
        sources: list[str] | None = None,
    ) -> Path:
        source_elems = "".join(f"<source>{s}</source>" for s in sources or [])
        classes = []
        for filename, hits in files.items():
            lines = "".join(f'<line number="{n}" hits="{c}"/>' for n, c in hits.items())
            classes.append(
                f'<class name="{filename}" filename="{filename}"><lines>{lines}</lines></class>'
            )
        return self.file(
            rel,
            '<?xml version="1.0"?>'
            f"<coverage><sources>{source_elems}</sources>"
            '<packages><package name="p"><classes>'
            f"{''.join(classes)}"
            "</classes></package></packages></coverage>",
        )

    def jacoco(self, rel: str, package: str, files: dict[str, dict[int, int]]) -> Path:
        """Each line value is the covered instruction count."""
        sourcefiles = []
        for filename, lines in files.items():
            line_elems = "".join(
                f'<line nr="{nr}" mi="{0 if ci else 1}" ci="{ci}" mb="0" cb="0"/>'
                for nr, ci in lines.items()
            )
            sourcefiles.append(f'<sourcefile name="{filename}">{line_elems}</sourcefile>')
        return self.file(
            rel,
            '<?xml version="1.0"?>'
            f'<report name="test"><package name="{package}">'
            f"{''.join(sourcefiles)}</package></report>",
        )

    def lcov(self, rel: str, files: dict[str, dict[int, int]]) -> Path:
        records = []
        for filename, hits in files.items():
            body = "".join(f"DA:{n},{c}\n" for n, c in hits.items())
            records.append(f"TN:\nSF:{filename}\n{body}end_of_record\n")
        return self.file(rel, "".join(records))


@pytest.fixture
def project(tmp_path: Path) -> ProjectBuilder:
    """Builder over an empty project root."""
    root = tmp_path / "project"
    root.mkdir()
    return ProjectBuilder(root)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()
