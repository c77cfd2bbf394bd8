"""Create, delete, rename and move entries inside the sandbox.

Every operation resolves and checks its inputs before the mutating call. The
check and the call are not locked together: two requests racing on the same
path (a rename against a delete, two moves into the same directory) are decided
by whichever system call the OS runs first. Nothing here pretends to be atomic
beyond what a single rename(2)/mkdir(2) gives.
"""

import logging
import os
import shutil

from fsbrowse.core.errors import (
    ConflictError,
    NotFoundError,
    OperationFailedError,
    SandboxError,
    ValidationError,
)
from fsbrowse.core.sandbox import Sandbox

logger = logging.getLogger(__name__)


def make_directory(sandbox: Sandbox, rel_path: str) -> str:
    """Create a directory and any missing ancestors. An existing target is an error."""
    if not rel_path:
        raise ValidationError("mkdir: missing path")

    target = sandbox.resolve(rel_path)
    if os.path.lexists(target):
        raise ConflictError(f"mkdir: {target} already exists")

    try:
        os.makedirs(target)
    except OSError as e:
        logger.error(f"Error creating directory {target}: {e}")
        raise OperationFailedError(str(e), code="MKDIR_FAILED") from e

    logger.info(f"Created directory {rel_path!r}")
    return sandbox.relative(target)


def delete_entry(sandbox: Sandbox, rel_path: str) -> str:
    """Remove a file, symlink or whole directory tree.

    A recursive delete that fails partway leaves whatever was not yet removed.
    """
    target = sandbox.resolve(rel_path, allow_root=False)
    if not os.path.lexists(target):
        raise NotFoundError(f"delete: {target} does not exist")

    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
    else:
        target.unlink()

    logger.info(f"Deleted {rel_path!r}")
    return rel_path


def rename_entry(sandbox: Sandbox, rel_path: str, new_name: str) -> str:
    """Rename an entry within its own directory. ``new_name`` must be a bare name."""
    if not rel_path or not new_name:
        raise ValidationError("rename: missing path or name")

    source = sandbox.resolve(rel_path, allow_root=False)
    sandbox.validate_name(new_name)

    if not os.path.lexists(source):
        raise NotFoundError(f"rename: {source} does not exist")

    destination = source.parent / new_name
    if os.path.lexists(destination):
        raise ConflictError(f"rename: {destination} already exists")

    try:
        os.rename(source, destination)
    except OSError as e:
        logger.error(f"Error renaming {source} to {destination}: {e}")
        raise OperationFailedError(str(e), code="RENAME_FAILED") from e

    new_rel = sandbox.relative(destination)
    logger.info(f"Renamed {rel_path!r} to {new_rel!r}")
    return new_rel


def move_entry(sandbox: Sandbox, source_rel: str, destination_rel: str) -> str:
    """Move an entry into another directory, keeping its name."""
    if not source_rel or not destination_rel:
        raise ValidationError("move: missing source or destination")

    try:
        source = sandbox.resolve(source_rel, allow_root=False)
        destination_dir = sandbox.resolve(destination_rel)
    except SandboxError as e:
        raise SandboxError(str(e), code="INVALID_PATH") from e

    if not os.path.lexists(source):
        raise NotFoundError(f"move: {source} does not exist", code="SOURCE_NOT_FOUND")
    if not destination_dir.is_dir():
        raise NotFoundError(f"move: {destination_dir} is not a directory", code="DEST_DIR_NOT_FOUND")

    final_path = destination_dir / source.name
    if os.path.lexists(final_path):
        raise ConflictError(f"move: {final_path} already exists", code="DEST_ALREADY_EXISTS")

    try:
        shutil.move(source, final_path)
    except OSError as e:
        # shutil.Error (moving a directory into itself) is an OSError too
        logger.error(f"Error moving {source} to {final_path}: {e}")
        raise OperationFailedError(str(e), code="MOVE_FAILED") from e

    new_rel = sandbox.relative(final_path)
    logger.info(f"Moved {source_rel!r} to {new_rel!r}")
    return new_rel
