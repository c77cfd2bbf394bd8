"""Directory listing with per-entry enrichment.

Descriptors are built fresh from the filesystem on every call; nothing is cached.
Timestamps are read-time snapshots and can be stale as soon as they are returned.
"""

import asyncio
import logging
import os
import posixpath
import stat
from datetime import datetime, timezone
from pathlib import Path

from fsbrowse.core.errors import NotFoundError
from fsbrowse.core.sandbox import UPLOAD_TEMP_PREFIX, join_relative
from fsbrowse.models.entry import ACCESS_DENIED, EntryDescriptor, EntryTimes, FileType
from fsbrowse.services.classifier import classify, permissions

logger = logging.getLogger(__name__)


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def _times(st: os.stat_result) -> EntryTimes:
    # st_birthtime only exists on some platforms; ctime is the closest stand-in elsewhere
    created = getattr(st, "st_birthtime", st.st_ctime)
    return EntryTimes(create=_iso(created), access=_iso(st.st_atime), modified=_iso(st.st_mtime))


def parent_of(rel_path: str) -> str:
    return posixpath.dirname(rel_path.rstrip("/")) or "."


def sort_key(entry: EntryDescriptor) -> tuple[bool, str, str]:
    """Directories first, then case-insensitive by name; the raw name breaks ties."""
    return (entry.type != FileType.DIR, entry.name.casefold(), entry.name)


def wire_name(name: str) -> str:
    """Names that aren't valid UTF-8 come back surrogate-escaped; replace those bytes so they can be sent."""
    return os.fsencode(name).decode("utf-8", "replace")


def _describe_child(path: Path, parent_rel: str) -> EntryDescriptor:
    file_type = classify(path)
    name = wire_name(path.name)
    rel_path = join_relative(parent_rel, name)
    try:
        st = os.stat(path)
    except OSError as e:
        logger.warning(f"Listing {parent_rel!r}: could not stat {name!r}: {e}")
        return EntryDescriptor(
            name=name,
            path=rel_path,
            parent_path=parent_rel,
            type=file_type,
            permissions=ACCESS_DENIED,
            size=0,
        )

    return EntryDescriptor(
        name=name,
        path=rel_path,
        parent_path=parent_rel,
        type=file_type,
        permissions=permissions(path),
        size=st.st_size,
        time=_times(st),
    )


def _scan(path: Path) -> tuple[os.stat_result, list[str] | None]:
    if not path.exists():
        raise NotFoundError(f"{path} does not exist")

    st = path.stat()
    if not stat.S_ISDIR(st.st_mode):
        return st, None
    # Uploads still in flight are not entries yet
    return st, [name for name in os.listdir(path) if not name.startswith(UPLOAD_TEMP_PREFIX)]


def _describe_file(path: Path, rel_path: str, st: os.stat_result) -> EntryDescriptor:
    return EntryDescriptor(
        name=wire_name(path.name),
        path=rel_path,
        parent_path=parent_of(rel_path),
        type=classify(path),
        permissions=permissions(path),
        size=st.st_size,
        time=_times(st),
    )


async def describe(path: Path, rel_path: str) -> EntryDescriptor:
    """Describe a file, or a directory together with its immediate children.

    Filesystem calls run in worker threads, off the event loop.
    """
    st, names = await asyncio.to_thread(_scan, path)
    if names is None:
        return await asyncio.to_thread(_describe_file, path, rel_path, st)

    children = await asyncio.gather(
        *(asyncio.to_thread(_describe_child, path / name, rel_path) for name in names)
    )

    return EntryDescriptor(
        name=wire_name(path.name),
        path=rel_path,
        parent_path=parent_of(rel_path),
        type=FileType.DIR,
        time=_times(st),
        children=sorted(children, key=sort_key),
    )
