"""Sandboxed path resolution - ensures every client path stays within the root directory.

Resolution is purely lexical: no filesystem call is made, and existence is
left to the caller. The root itself is canonicalized once, when the sandbox is
built, so string containment is enough to prove a path is inside it.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from fsbrowse.core.errors import SandboxError

# Leading "./" and "../" segments (the client's "./" notation, or a lexical traversal attempt)
_LEADING_DOT_SEGMENTS = re.compile(r"^(?:\.{1,2}(?:/+|$))+")

# In-flight uploads are written under this prefix and renamed into place when complete
UPLOAD_TEMP_PREFIX = ".fsbrowse-upload-"


@dataclass(frozen=True)
class Sandbox:
    root: str

    @classmethod
    def from_directory(cls, directory: str | Path) -> "Sandbox":
        return cls(root=os.path.realpath(os.fspath(directory)))

    @property
    def root_path(self) -> Path:
        return Path(self.root)

    def contains(self, absolute_path: str) -> bool:
        """True for the root itself or anything below it.

        The separator boundary keeps siblings such as ``/files-old`` out of ``/files``.
        """
        if absolute_path == self.root:
            return True
        return absolute_path.startswith(self.root.rstrip(os.sep) + os.sep)

    def resolve(self, relative_path: str, allow_root: bool = True) -> Path:
        """Resolve a client path within the sandbox. Raises SandboxError if it escapes.

        With ``allow_root=False`` the root itself is rejected too, for operations
        that would delete the root or move it somewhere else.
        """
        if "\x00" in relative_path:
            raise SandboxError(f"Path {relative_path!r} contains a NUL byte")

        cleaned = _LEADING_DOT_SEGMENTS.sub("", relative_path.replace("\\", "/"))
        resolved = os.path.normpath(os.path.join(self.root, cleaned))

        if not self.contains(resolved):
            raise SandboxError(f"Path {relative_path!r} escapes the sandbox")
        if not allow_root and resolved == self.root:
            raise SandboxError(f"Path {relative_path!r} addresses the sandbox root")

        return Path(resolved)

    def relative(self, absolute_path: str | Path) -> str:
        """Turn an in-sandbox absolute path back into the client's relative form."""
        rel = os.path.relpath(os.fspath(absolute_path), self.root)
        return PurePosixPath(*Path(rel).parts).as_posix()

    @staticmethod
    def validate_name(name: str) -> str:
        """Accept a bare entry name only; anything that could address another directory is rejected."""
        if not name or name in (".", "..") or any(c in name for c in ("/", "\\", "\x00")):
            raise SandboxError(f"Invalid entry name {name!r}")
        if name.startswith(UPLOAD_TEMP_PREFIX):
            raise SandboxError(f"Entry name {name!r} uses the reserved upload prefix")
        return name


def join_relative(parent: str, name: str) -> str:
    """Join a client relative path and an entry name, keeping the client's notation."""
    if not parent or parent in (".", "./"):
        return name
    return f"{parent.rstrip('/')}/{name}"
