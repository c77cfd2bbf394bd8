"""Inline preview of a single file. Full-fidelity transfer goes through the download endpoint."""

from dataclasses import dataclass
from pathlib import Path

from fsbrowse.core.errors import FileTooLargeError, NotFoundError, ValidationError

DEFAULT_MAX_BYTES = 5 * 1024 * 1024


@dataclass
class Preview:
    text: str
    size: int
    binary: bool = False


def read_preview(path: Path, max_bytes: int = DEFAULT_MAX_BYTES) -> Preview:
    if not path.exists():
        raise NotFoundError(f"{path} does not exist")
    if path.is_dir():
        raise ValidationError(f"{path} is a directory", code="IS_DIRECTORY")

    size = path.stat().st_size
    if size > max_bytes:
        raise FileTooLargeError(f"{path} is {size} bytes, preview limit is {max_bytes}")

    try:
        return Preview(text=path.read_bytes().decode("utf-8"), size=size)
    except UnicodeDecodeError:
        return Preview(text=f"[Binary file - {size} bytes]", size=size, binary=True)
