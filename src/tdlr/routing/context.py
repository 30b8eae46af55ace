"""Per-file variable bindings for routing expressions.

FileContext captures one file's metadata plus its position in the run and
turns it into the immutable EvaluationContext the evaluator reads.

Variables:

    String  name, stem, ext, mime, type, path, dir, size_str,
            date, time, datetime, weekday
    Number  depth, index, num, total, size, size_kb, size_mb, size_gb,
            year, month, day, hour, minute, KB, MB, GB
    Bool    is_image, is_video, is_audio, is_document, is_archive,
            is_text, is_code, is_media
"""

import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from tdlr.routing.expressions import EvaluationContext, Kind
from tdlr.routing.expressions.values import GB, KB, MB
from tdlr.routing.filetypes import file_type_for, mime_for


WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

MEDIA_TYPES = ("image", "video", "audio")

VARIABLE_KINDS: dict[str, Kind] = {
    **{
        name: Kind.STRING
        for name in (
            "name", "stem", "ext", "mime", "type", "path", "dir", "size_str",
            "date", "time", "datetime", "weekday",
        )
    },
    **{
        name: Kind.NUMBER
        for name in (
            "depth", "index", "num", "total", "size", "size_kb", "size_mb", "size_gb",
            "year", "month", "day", "hour", "minute", "KB", "MB", "GB",
        )
    },
    **{
        name: Kind.BOOL
        for name in (
            "is_image", "is_video", "is_audio", "is_document", "is_archive",
            "is_text", "is_code", "is_media",
        )
    },
}


class TimestampSource(Enum):
    """Which file timestamp feeds the date/time variables for a run."""

    MODIFIED = "modified"
    CREATED = "created"


def format_size(size: int) -> str:
    """Human readable size using the largest unit whose magnitude is >= 1."""
    if size < KB:
        return f"{size} B"
    amount, unit = size / KB, "KB"
    for larger in ("MB", "GB"):
        # Promote once one decimal would show 1024.0
        if round(amount, 1) < KB:
            break
        amount, unit = amount / KB, larger
    return f"{amount:.1f} {unit}"


def file_timestamp(stat: os.stat_result, source: TimestampSource) -> datetime:
    """Local-time timestamp of a file.

    CREATED uses st_birthtime where the platform records it and falls back
    to st_ctime elsewhere.
    """
    if source is TimestampSource.CREATED:
        seconds = getattr(stat, "st_birthtime", None)
        if seconds is None:
            seconds = stat.st_ctime
    else:
        seconds = stat.st_mtime
    return datetime.fromtimestamp(seconds)


@dataclass(frozen=True)
class FileContext:
    """Metadata for one file being routed.

    Attributes:
        name: File name with extension
        stem: File name without extension
        ext: Lowercase extension without the dot ("" if none)
        mime: MIME type guessed from the extension
        file_type: One of image/video/audio/document/archive/text/code/other
        size: Size in bytes
        path: Full path as given
        dir: Name of the parent directory
        depth: Directories between the collection root and the file
        index: 0-based position in the run
        total: Number of files in the run
        timestamp: Modification or creation time, in local time
    """

    name: str
    stem: str
    ext: str
    mime: str
    file_type: str
    size: int
    path: str
    dir: str
    depth: int
    index: int
    total: int
    timestamp: datetime

    @classmethod
    def from_path(
        cls,
        path: Path,
        index: int,
        total: int,
        root: Path | None = None,
        timestamp_source: TimestampSource = TimestampSource.MODIFIED,
    ) -> "FileContext":
        """Build the context for a file on disk.

        Raises:
            OSError: If the file cannot be stat'ed
        """
        path = Path(path)
        stat = path.stat()
        ext = path.suffix[1:].lower()

        if root is not None:
            try:
                parts = path.relative_to(root).parts
            except ValueError:
                parts = path.parts
        else:
            parts = path.parts
        depth = max(len(parts) - 1, 0)

        return cls(
            name=path.name,
            stem=path.stem,
            ext=ext,
            mime=mime_for(ext),
            file_type=file_type_for(ext),
            size=stat.st_size,
            path=str(path),
            dir=path.parent.name,
            depth=depth,
            index=index,
            total=total,
            timestamp=file_timestamp(stat, timestamp_source),
        )

    @property
    def is_media(self) -> bool:
        return self.file_type in MEDIA_TYPES

    def to_context(self) -> EvaluationContext:
        """Immutable variable bindings for the evaluator; KB, MB and GB are added by it."""
        ts = self.timestamp
        return EvaluationContext(
            {
                # File info
                "name": self.name,
                "stem": self.stem,
                "ext": self.ext,
                "mime": self.mime,
                "type": self.file_type,
                "path": self.path,
                "dir": self.dir,
                "depth": self.depth,
                # Size
                "size": self.size,
                "size_kb": self.size / KB,
                "size_mb": self.size / MB,
                "size_gb": self.size / GB,
                "size_str": format_size(self.size),
                # Date/time
                "date": ts.strftime("%Y-%m-%d"),
                "time": ts.strftime("%H:%M:%S"),
                "datetime": ts.strftime("%Y-%m-%d %H:%M:%S"),
                "year": ts.year,
                "month": ts.month,
                "day": ts.day,
                "hour": ts.hour,
                "minute": ts.minute,
                "weekday": WEEKDAYS[ts.weekday()],
                # File type flags
                "is_image": self.file_type == "image",
                "is_video": self.file_type == "video",
                "is_audio": self.file_type == "audio",
                "is_document": self.file_type == "document",
                "is_archive": self.file_type == "archive",
                "is_text": self.file_type == "text",
                "is_code": self.file_type == "code",
                "is_media": self.is_media,
                # Upload context
                "index": self.index,
                "total": self.total,
                "num": self.index + 1,
            }
        )
