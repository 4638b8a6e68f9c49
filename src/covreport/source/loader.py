"""Source file resolution.

Reports name source files in their own terms (package paths for JaCoCo,
class file names for Cobertura, tracefile paths for LCOV). Loaders turn such
a name into file content, the encoding used to decode it, and the
project-relative name the payload reports it under.

Loaders are tried in order by MultiSourceLoader:
1. DirectorySourceLoader, one per source root of every module
2. ScanSourceLoader, loading absolute and exact project-relative names
   inside the project, then searching the whole tree by path suffix
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Protocol

import structlog

from covreport.core.errors import IOFailure, ProcessingError, SourceNotFoundError

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class LoadedSource:
    """Resolved source file content."""

    name: str  # project-relative, POSIX separators
    text: str
    encoding: str


class SourceLoader(Protocol):
    """Resolves a report's source reference to file content."""

    def load(self, name: str) -> LoadedSource:
        """Load source content.

        Raises:
            SourceNotFoundError: If no file matches the name.
        """
        ...


def _relative_name(path: Path, base_dir: Path) -> str:
    try:
        return path.resolve().relative_to(base_dir.resolve()).as_posix()
    except ValueError:
        # Outside the project: report the absolute path
        return path.resolve().as_posix()


def _read(path: Path, name: str, encoding: str) -> str:
    try:
        with path.open(encoding=encoding, newline="") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise ProcessingError.source_undecodable(name, encoding, str(e)) from e
    except OSError as e:
        raise IOFailure.file(str(path), str(e)) from e


def _clean(name: str) -> str:
    cleaned = name.replace("\\", "/")
    while cleaned.startswith("./"):
        cleaned = cleaned[2:]
    return cleaned


class DirectorySourceLoader:
    """Loads sources from a single source root."""

    def __init__(self, base_dir: Path, source_dir: Path, encoding: str = "utf-8") -> None:
        self.base_dir = base_dir
        self.source_dir = source_dir
        self.encoding = encoding

    def load(self, name: str) -> LoadedSource:
        cleaned = _clean(name)
        candidate = Path(cleaned)
        if not candidate.is_absolute():
            candidate = self.source_dir / candidate
            # Reject references that climb out of the source root
            try:
                candidate.resolve().relative_to(self.source_dir.resolve())
            except ValueError:
                raise SourceNotFoundError.for_name(name) from None
        if not candidate.is_file():
            raise SourceNotFoundError.for_name(name)
        text = _read(candidate, name, self.encoding)
        return LoadedSource(
            name=_relative_name(candidate, self.base_dir),
            text=text,
            encoding=self.encoding,
        )

    def __repr__(self) -> str:
        return f"DirectorySourceLoader({self.source_dir})"


class ScanSourceLoader:
    """Finds a source anywhere under the base directory by path suffix.

    Absolute names inside the base directory and exact project-relative
    names are loaded directly. Otherwise the file index is built on first
    use; hidden directories are skipped. When several files match, the
    lexicographically first path wins so the result does not depend on
    filesystem order.
    """

    def __init__(self, base_dir: Path, encoding: str = "utf-8") -> None:
        self.base_dir = base_dir
        self.encoding = encoding
        self._by_filename: dict[str, list[PurePosixPath]] | None = None

    def _index(self) -> dict[str, list[PurePosixPath]]:
        if self._by_filename is None:
            index: dict[str, list[PurePosixPath]] = {}
            for root, dirs, files in os.walk(self.base_dir):
                dirs[:] = sorted(d for d in dirs if not d.startswith("."))
                rel_root = PurePosixPath(Path(root).relative_to(self.base_dir).as_posix())
                for filename in files:
                    index.setdefault(filename, []).append(rel_root / filename)
            for paths in index.values():
                paths.sort()
            self._by_filename = index
            log.debug("source_scan_indexed", base_dir=str(self.base_dir), files=len(index))
        return self._by_filename

    def load(self, name: str) -> LoadedSource:
        wanted = PurePosixPath(_clean(name))
        if not wanted.name:
            raise SourceNotFoundError.for_name(name)
        if wanted.is_absolute():
            return self._load_path(Path(wanted), name)

        # An exact project-relative match beats any suffix match
        exact = self.base_dir / wanted
        if exact.is_file():
            return self._load_path(exact, name)

        suffix = wanted.parts
        for rel_path in self._index().get(wanted.name, []):
            if rel_path.parts[-len(suffix) :] == suffix:
                return self._load_inside(self.base_dir / rel_path, name)
        raise SourceNotFoundError.for_name(name)

    def _load_path(self, path: Path, name: str) -> LoadedSource:
        """Load a file by path if it lies inside the base directory."""
        try:
            path.resolve().relative_to(self.base_dir.resolve())
        except ValueError:
            raise SourceNotFoundError.for_name(name) from None
        if not path.is_file():
            raise SourceNotFoundError.for_name(name)
        return self._load_inside(path, name)

    def _load_inside(self, path: Path, name: str) -> LoadedSource:
        text = _read(path, name, self.encoding)
        return LoadedSource(
            name=_relative_name(path, self.base_dir),
            text=text,
            encoding=self.encoding,
        )

    def __repr__(self) -> str:
        return f"ScanSourceLoader({self.base_dir})"


class MultiSourceLoader:
    """Tries each loader in order; the first that finds the file wins."""

    def __init__(self, loaders: Sequence[SourceLoader]) -> None:
        self.loaders = list(loaders)

    def load(self, name: str) -> LoadedSource:
        for loader in self.loaders:
            try:
                return loader.load(name)
            except SourceNotFoundError:
                continue
        raise SourceNotFoundError.for_name(name)


def create_source_loader(
    project_dir: Path,
    *,
    modules: Sequence[str] = (".",),
    source_directories: Sequence[str] = ("src/main/java",),
    encoding: str = "utf-8",
    scan: bool = True,
) -> MultiSourceLoader:
    """Build the loader chain for a project.

    Source roots are taken relative to each module, in module order; roots
    that do not exist are left out. Absolute source directories are used
    once, as given.
    """
    loaders: list[SourceLoader] = []
    seen: set[Path] = set()
    for module in modules:
        module_dir = project_dir / module
        for directory in source_directories:
            root = Path(directory) if Path(directory).is_absolute() else module_dir / directory
            key = root.resolve()
            if key in seen or not root.is_dir():
                continue
            seen.add(key)
            loaders.append(DirectorySourceLoader(project_dir, root, encoding))
    if scan:
        loaders.append(ScanSourceLoader(project_dir, encoding))
    log.debug("source_loaders_created", loaders=[repr(loader) for loader in loaders])
    return MultiSourceLoader(loaders)
