"""Tests for source file resolution."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from covreport.core.errors import ErrorCode, ProcessingError, SourceNotFoundError
from covreport.source.loader import (
    DirectorySourceLoader,
    MultiSourceLoader,
    ScanSourceLoader,
    create_source_loader,
)

if TYPE_CHECKING:
    from conftest import ProjectBuilder


class TestDirectorySourceLoader:
    def test_loads_relative_to_source_root(self, project: ProjectBuilder) -> None:
        # Given
        project.file("src/main/java/com/example/Foo.java", "class Foo {}")
        loader = DirectorySourceLoader(project.root, project.root / "src/main/java")

        # When
        loaded = loader.load("com/example/Foo.java")

        # Then
        assert loaded.name == "src/main/java/com/example/Foo.java"
        assert loaded.text == "class Foo {}"
        assert loaded.encoding == "utf-8"

    def test_absolute_reference_used_as_is(self, project: ProjectBuilder) -> None:
        path = project.file("lib/util.js", "x")
        loader = DirectorySourceLoader(project.root, project.root / "src")

        assert loader.load(str(path)).name == "lib/util.js"

    def test_missing_file_not_found(self, project: ProjectBuilder) -> None:
        loader = DirectorySourceLoader(project.root, project.root / "src")
        with pytest.raises(SourceNotFoundError):
            loader.load("Nope.java")

    def test_reference_escaping_root_not_found(self, project: ProjectBuilder) -> None:
        """A name climbing out of the source root never resolves there."""
        project.file("secret.txt", "x")
        loader = DirectorySourceLoader(project.root, project.root / "src")

        with pytest.raises(SourceNotFoundError):
            loader.load("../secret.txt")

    def test_crlf_kept_for_record_normalization(self, project: ProjectBuilder) -> None:
        (project.root / "src").mkdir()
        (project.root / "src" / "a.c").write_bytes(b"x\r\ny")
        loader = DirectorySourceLoader(project.root, project.root / "src")

        assert loader.load("a.c").text == "x\r\ny"

    def test_undecodable_source_fails(self, project: ProjectBuilder) -> None:
        (project.root / "src").mkdir()
        (project.root / "src" / "bin.c").write_bytes(b"\xff\xfe\xfa")
        loader = DirectorySourceLoader(project.root, project.root / "src", encoding="utf-8")

        with pytest.raises(ProcessingError) as exc_info:
            loader.load("bin.c")
        assert exc_info.value.code is ErrorCode.SOURCE_UNDECODABLE

    def test_configured_encoding_used(self, project: ProjectBuilder) -> None:
        (project.root / "src").mkdir()
        (project.root / "src" / "a.txt").write_bytes("café".encode("latin-1"))
        loader = DirectorySourceLoader(project.root, project.root / "src", encoding="latin-1")

        loaded = loader.load("a.txt")
        assert loaded.text == "café"
        assert loaded.encoding == "latin-1"


class TestScanSourceLoader:
    def test_finds_by_path_suffix(self, project: ProjectBuilder) -> None:
        project.file("web/app/static/js/app.js", "x")
        loader = ScanSourceLoader(project.root)

        assert loader.load("js/app.js").name == "web/app/static/js/app.js"

    def test_first_sorted_match_wins(self, project: ProjectBuilder) -> None:
        project.file("b/util.py", "b")
        project.file("a/util.py", "a")

        assert ScanSourceLoader(project.root).load("util.py").name == "a/util.py"

    def test_hidden_directories_skipped(self, project: ProjectBuilder) -> None:
        project.file(".cache/Foo.java", "x")

        with pytest.raises(SourceNotFoundError):
            ScanSourceLoader(project.root).load("Foo.java")

    def test_partial_component_does_not_match(self, project: ProjectBuilder) -> None:
        project.file("src/myfoo/Bar.java", "x")

        with pytest.raises(SourceNotFoundError):
            ScanSourceLoader(project.root).load("foo/Bar.java")

    def test_absolute_name_inside_project(self, project: ProjectBuilder) -> None:
        """geninfo and istanbul write absolute SF: paths."""
        source = project.file("lib/a.js", "x")

        loaded = ScanSourceLoader(project.root).load(str(source))

        assert loaded.name == "lib/a.js"
        assert loaded.text == "x"

    def test_absolute_name_outside_project_not_found(
        self, project: ProjectBuilder, tmp_path: Path
    ) -> None:
        outside = tmp_path / "elsewhere" / "a.js"
        outside.parent.mkdir()
        outside.write_text("x")

        with pytest.raises(SourceNotFoundError):
            ScanSourceLoader(project.root).load(str(outside))

    def test_exact_relative_path_beats_suffix_match(self, project: ProjectBuilder) -> None:
        # Given
        project.file("build/lib/pkg/mod.py", "copy")
        project.file("pkg/mod.py", "original")

        # When
        loaded = ScanSourceLoader(project.root).load("pkg/mod.py")

        # Then
        assert loaded.name == "pkg/mod.py"
        assert loaded.text == "original"

    def test_relative_name_escaping_project_not_found(
        self, project: ProjectBuilder, tmp_path: Path
    ) -> None:
        (tmp_path / "secret.py").write_text("x")

        with pytest.raises(SourceNotFoundError):
            ScanSourceLoader(project.root).load("../secret.py")


class TestMultiSourceLoader:
    def test_first_loader_that_finds_wins(self, project: ProjectBuilder) -> None:
        project.file("one/A.java", "first")
        project.file("two/A.java", "second")
        loader = MultiSourceLoader(
            [
                DirectorySourceLoader(project.root, project.root / "one"),
                DirectorySourceLoader(project.root, project.root / "two"),
            ]
        )

        assert loader.load("A.java").text == "first"

    def test_not_found_when_no_loader_finds(self, project: ProjectBuilder) -> None:
        with pytest.raises(SourceNotFoundError, match="No source found for A.java"):
            MultiSourceLoader([]).load("A.java")


class TestCreateSourceLoader:
    def test_module_source_roots_then_scan(self, project: ProjectBuilder) -> None:
        # Given
        project.file("core/src/main/java/a/A.java", "core")
        project.file("web/src/main/java/b/B.java", "web")
        project.file("scripts/tool.py", "tool")

        # When
        loader = create_source_loader(project.root, modules=["core", "web"])

        # Then
        assert loader.load("a/A.java").name == "core/src/main/java/a/A.java"
        assert loader.load("b/B.java").name == "web/src/main/java/b/B.java"
        assert loader.load("tool.py").name == "scripts/tool.py"

    def test_scan_disabled(self, project: ProjectBuilder) -> None:
        project.file("scripts/tool.py", "tool")
        loader = create_source_loader(project.root, scan=False)

        with pytest.raises(SourceNotFoundError):
            loader.load("tool.py")

    def test_missing_roots_left_out(self, project: ProjectBuilder) -> None:
        loader = create_source_loader(project.root, source_directories=["nope"], scan=False)
        assert loader.loaders == []

    def test_absolute_source_directory(self, project: ProjectBuilder, tmp_path: Path) -> None:
        shared = tmp_path / "shared"
        (shared / "x").mkdir(parents=True)
        (shared / "x" / "S.java").write_text("s")

        loader = create_source_loader(
            project.root, modules=["a", "b"], source_directories=[str(shared)], scan=False
        )

        assert len(loader.loaders) == 1
        assert loader.load("x/S.java").text == "s"
