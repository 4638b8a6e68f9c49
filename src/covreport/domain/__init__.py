"""Domain records: job metadata, git snapshot, source coverage."""

from covreport.domain.git import Git, GitHead, GitRemote, load_git_snapshot
from covreport.domain.job import Job
from covreport.domain.source import SourceFile
from covreport.domain.validation import (
    JobValidator,
    Severity,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "Git",
    "GitHead",
    "GitRemote",
    "Job",
    "JobValidator",
    "Severity",
    "SourceFile",
    "ValidationIssue",
    "ValidationResult",
    "load_git_snapshot",
]
