"""Source resolution and the source callback chain."""

from covreport.source.callback import SeenSources, SourceCallback, UniqueSourceCallback
from covreport.source.loader import (
    DirectorySourceLoader,
    LoadedSource,
    MultiSourceLoader,
    ScanSourceLoader,
    SourceLoader,
    create_source_loader,
)

__all__ = [
    "DirectorySourceLoader",
    "LoadedSource",
    "MultiSourceLoader",
    "ScanSourceLoader",
    "SeenSources",
    "SourceCallback",
    "SourceLoader",
    "UniqueSourceCallback",
    "create_source_loader",
]
