"""Collect the files an upload run will route.

Paths may be files or directories; directories are walked recursively in
sorted order so a run's file indexes are stable.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


def normalize_ext(ext: str) -> str:
    """Normalize an extension string (remove leading dots, lowercase)."""
    return ext.strip().lstrip(".").lower()


class FileFilter:
    """Include/exclude filter on file extensions.

    If include is set a file must match one of its extensions; if exclude is
    set it must match none of them.
    """

    def __init__(
        self,
        include: Iterable[str] | None = None,
        exclude: Iterable[str] | None = None,
    ):
        self.include = {normalize_ext(e) for e in include} if include else None
        self.exclude = {normalize_ext(e) for e in exclude} if exclude else None

    def matches(self, path: Path) -> bool:
        ext = path.suffix[1:].lower()
        if self.include is not None and ext not in self.include:
            return False
        if self.exclude is not None and ext in self.exclude:
            return False
        return True


@dataclass(frozen=True)
class CollectedFile:
    """A file ready for routing.

    Attributes:
        path: Path to the file
        root: Directory argument it was found under, or None if the file was
            named directly
    """

    path: Path
    root: Path | None = None


@dataclass
class CollectResult:
    files: list[CollectedFile] = field(default_factory=list)
    failed: int = 0


def collect_files(paths: Iterable[str | Path], file_filter: FileFilter) -> CollectResult:
    """Collect all files from paths (supports both files and directories)."""
    result = CollectResult()

    for raw in paths:
        path = Path(raw)

        if not path.exists():
            logger.warning("Path not found: %s", path)
            result.failed += 1
            continue

        if path.is_file():
            if file_filter.matches(path):
                result.files.append(CollectedFile(path))
        elif path.is_dir():
            _collect_from_dir(path, path, file_filter, result)

    return result


def _collect_from_dir(
    directory: Path, root: Path, file_filter: FileFilter, result: CollectResult
) -> None:
    """Recursively collect files from a directory."""
    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        logger.warning("Cannot read dir %s: %s", directory, e)
        result.failed += 1
        return

    for entry in entries:
        if entry.is_file():
            if file_filter.matches(entry):
                result.files.append(CollectedFile(entry, root))
        elif entry.is_dir():
            _collect_from_dir(entry, root, file_filter, result)
