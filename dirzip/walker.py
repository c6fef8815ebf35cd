from __future__ import annotations

import errno
import logging
import os
import posixpath
from dataclasses import dataclass
from typing import Iterator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalkEntry:
    """One filesystem entry seen during a walk."""
    disk_path: str
    archive_path: str
    is_directory: bool


def archive_join(prefix: str, name: str) -> str:
    return posixpath.join(prefix, name) if prefix else name


def walk(root, archive_prefix: str = "") -> Iterator[WalkEntry]:
    """Yield the descendants of root depth-first, parents before children.

    Member names are root-relative, '/'-separated and placed under
    archive_prefix. Symlinks are followed; a directory that is already an
    ancestor on the current path raises OSError(ELOOP). Any listing or stat
    failure propagates and ends the walk.
    """
    root = os.fspath(root)
    st = os.stat(root)
    yield from _walk_dir(root, archive_prefix, {(st.st_dev, st.st_ino)})


def _walk_dir(path: str, prefix: str, ancestors: set) -> Iterator[WalkEntry]:
    with os.scandir(path) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        disk_path = os.path.join(path, entry.name)
        archive_path = archive_join(prefix, entry.name)
        if entry.is_dir():
            st = os.stat(disk_path)
            key = (st.st_dev, st.st_ino)
            if key in ancestors:
                raise OSError(errno.ELOOP, "directory loop detected", disk_path)
            yield WalkEntry(disk_path, archive_path, True)
            ancestors.add(key)
            try:
                yield from _walk_dir(disk_path, archive_path, ancestors)
            finally:
                ancestors.discard(key)
        elif entry.is_file():
            yield WalkEntry(disk_path, archive_path, False)
        elif entry.is_symlink():
            # dangling link: report it the same way open() would
            os.stat(disk_path)
        else:
            logger.debug("skipping %s: not a regular file", disk_path)
