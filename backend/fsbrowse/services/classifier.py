"""Coarse semantic typing and access probing for filesystem entries."""

import logging
import os
import stat
from pathlib import Path

from fsbrowse.models.entry import ACCESS_DENIED, FileType, Permissions

logger = logging.getLogger(__name__)

_TYPE_EXTENSIONS: dict[FileType, tuple[str, ...]] = {
    FileType.IMAGE: ("jpg", "jpeg", "png", "gif", "webp", "svg", "bmp", "ico"),
    FileType.VIDEO: ("mp4", "webm", "avi", "mov", "mkv", "flv", "wmv", "quicktime"),
    FileType.AUDIO: ("mp3", "wav", "flac", "aac", "m4a", "ogg", "wma", "opus"),
    FileType.TEXT: ("txt", "md", "json", "xml", "yaml", "yml", "toml", "csv", "log"),
    FileType.CODE: (
        "js", "ts", "jsx", "tsx", "py", "java", "cpp", "c", "go", "rs", "rb", "php", "html", "css",
    ),
    FileType.ARCHIVE: ("zip", "7z", "rar", "tar", "gz", "bz2", "xz"),
    FileType.DOCUMENT: ("pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "odt", "ods", "odp"),
}

EXTENSION_TYPES: dict[str, FileType] = {
    ext: file_type for file_type, exts in _TYPE_EXTENSIONS.items() for ext in exts
}


def type_for_extension(extension: str) -> FileType:
    """Map an extension (with or without the dot, any case) to its semantic type."""
    return EXTENSION_TYPES.get(extension.lstrip(".").lower(), FileType.OTHER)


def classify(path: Path) -> FileType:
    """Best-effort type of an entry. Never raises; unreadable entries are ``other``."""
    try:
        mode = os.lstat(path).st_mode
    except OSError as e:
        logger.debug(f"Could not stat {path} for classification: {e}")
        return FileType.OTHER

    if stat.S_ISLNK(mode):
        return FileType.SYMLINK
    if stat.S_ISDIR(mode):
        return FileType.DIR
    return type_for_extension(path.suffix)


def permissions(path: Path) -> Permissions:
    if not os.access(path, os.R_OK):
        return ACCESS_DENIED
    if os.access(path, os.W_OK):
        return ["read", "write"]
    return ["read"]
