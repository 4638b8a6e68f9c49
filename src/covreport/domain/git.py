"""Git snapshot embedded in a job.

The snapshot is produced by whoever inspects the repository; here it is only
carried, serialized and loaded back from its JSON form.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from covreport.core.errors import IOFailure, ProcessingError


@dataclass(frozen=True, slots=True)
class GitHead:
    """Head commit identity."""

    id: str | None = None
    author_name: str | None = None
    author_email: str | None = None
    committer_name: str | None = None
    committer_email: str | None = None
    message: str | None = None
    timestamp: int | None = None  # seconds since epoch


@dataclass(frozen=True, slots=True)
class GitRemote:
    name: str
    url: str


@dataclass(frozen=True, slots=True)
class Git:
    """Branch, head commit and remotes of the repository under test."""

    head: GitHead = field(default_factory=GitHead)
    branch: str | None = None
    remotes: tuple[GitRemote, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Payload ``git`` object. Absent head fields are omitted."""
        head = {
            key: value
            for key, value in (
                ("id", self.head.id),
                ("author_name", self.head.author_name),
                ("author_email", self.head.author_email),
                ("committer_name", self.head.committer_name),
                ("committer_email", self.head.committer_email),
                ("message", self.head.message),
                ("timestamp", self.head.timestamp),
            )
            if value is not None
        }
        data: dict[str, Any] = {"head": head}
        if self.branch is not None:
            data["branch"] = self.branch
        data["remotes"] = [{"name": r.name, "url": r.url} for r in self.remotes]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Git:
        head_data = data.get("head") or {}
        head = GitHead(
            id=head_data.get("id"),
            author_name=head_data.get("author_name"),
            author_email=head_data.get("author_email"),
            committer_name=head_data.get("committer_name"),
            committer_email=head_data.get("committer_email"),
            message=head_data.get("message"),
            timestamp=head_data.get("timestamp"),
        )
        remotes = tuple(
            GitRemote(name=r["name"], url=r["url"]) for r in data.get("remotes") or []
        )
        return cls(head=head, branch=data.get("branch"), remotes=remotes)


def load_git_snapshot(path: Path) -> Git:
    """Read a snapshot written in the payload's ``git`` shape."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise IOFailure.file(str(path), str(e)) from e
    try:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("top-level value must be an object")
        return Git.from_dict(data)
    except (ValueError, KeyError, TypeError) as e:
        raise ProcessingError.invalid_git_snapshot(str(path), str(e)) from e
