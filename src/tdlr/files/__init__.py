"""File discovery and extension filtering."""

from tdlr.files.collector import (
    CollectedFile,
    CollectResult,
    FileFilter,
    collect_files,
    normalize_ext,
)

__all__ = [
    "CollectedFile",
    "CollectResult",
    "FileFilter",
    "collect_files",
    "normalize_ext",
]
