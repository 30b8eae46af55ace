"""Extension classification and MIME lookup."""

FILE_TYPES = (
    "image",
    "video",
    "audio",
    "document",
    "archive",
    "text",
    "code",
    "other",
)

_EXTENSIONS_BY_TYPE: dict[str, tuple[str, ...]] = {
    "image": (
        "jpg", "jpeg", "png", "gif", "webp", "svg", "bmp", "ico", "tiff", "heic",
        "raw", "cr2", "nef",
    ),
    "video": (
        "mp4", "mkv", "avi", "mov", "webm", "flv", "wmv", "m4v", "3gp", "mts", "m2ts",
    ),
    "audio": (
        "mp3", "wav", "ogg", "flac", "aac", "m4a", "wma", "opus", "aiff", "ape",
    ),
    "document": (
        "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "odt", "ods", "odp",
        "rtf", "epub",
    ),
    "archive": (
        "zip", "rar", "7z", "tar", "gz", "bz2", "xz", "iso", "dmg", "cab",
    ),
    "text": (
        "txt", "md", "csv", "log", "ini", "cfg", "conf",
    ),
    "code": (
        "rs", "py", "js", "java", "c", "cpp", "h", "hpp", "go", "rb", "php", "swift",
        "kt", "scala", "html", "css", "scss", "sass", "less", "json", "xml", "yaml",
        "yml", "toml", "sh", "bash", "zsh", "fish", "bat", "ps1", "sql", "r", "lua",
        "perl", "vue", "jsx", "tsx", "svelte",
    ),
}

EXTENSION_TYPES: dict[str, str] = {
    ext: file_type
    for file_type, extensions in _EXTENSIONS_BY_TYPE.items()
    for ext in extensions
}

MIME_TYPES: dict[str, str] = {
    # Images
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "bmp": "image/bmp",
    "ico": "image/x-icon",
    "tiff": "image/tiff",
    "heic": "image/heic",
    # Videos
    "mp4": "video/mp4",
    "mkv": "video/x-matroska",
    "avi": "video/x-msvideo",
    "mov": "video/quicktime",
    "webm": "video/webm",
    "flv": "video/x-flv",
    "wmv": "video/x-ms-wmv",
    "ts": "video/mp2t",
    # Audio
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
    "aac": "audio/aac",
    "m4a": "audio/mp4",
    "opus": "audio/opus",
    # Documents
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    # Archives
    "zip": "application/zip",
    "rar": "application/vnd.rar",
    "7z": "application/x-7z-compressed",
    "tar": "application/x-tar",
    "gz": "application/gzip",
    # Text/Code
    "txt": "text/plain",
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "text/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "md": "text/markdown",
    "csv": "text/csv",
    "yaml": "text/yaml",
    "yml": "text/yaml",
}

DEFAULT_MIME = "application/octet-stream"


def file_type_for(ext: str) -> str:
    """Category for an extension (without dot), defaulting to "other"."""
    return EXTENSION_TYPES.get(ext.lower(), "other")


def mime_for(ext: str) -> str:
    """MIME type for an extension (without dot)."""
    return MIME_TYPES.get(ext.lower(), DEFAULT_MIME)
