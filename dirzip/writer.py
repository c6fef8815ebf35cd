"""
ZIP container output.

ArchiveWriter owns one output file and the zipfile.ZipFile layered on it.
Members are always deflated and stamped with the time they were archived,
not with the source file's mtime.

Names that were transcoded to a legacy charset are written as raw bytes
with the UTF-8 flag (general purpose bit 11) cleared, so extractors fall
back to their local codepage instead of decoding the bytes as UTF-8.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import time
import zipfile
from dataclasses import dataclass, field
from typing import BinaryIO

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
UTF8_NAME_FLAG = 0x800


@dataclass(frozen=True)
class ArchiveMember:
    """Metadata for one stored file.

    name is what goes into the container: raw bytes when non_utf8 is set,
    otherwise a str that zipfile encodes itself. logical_name is the
    readable '/'-separated path it came from; transcoded members are
    indexed under it inside the writer.
    """
    name: str | bytes
    logical_name: str
    modified_time: float = field(default_factory=time.time)
    non_utf8: bool = False
    size: int | None = None
    mode: int | None = None
    compression: int = zipfile.ZIP_DEFLATED


class MemberInfo(zipfile.ZipInfo):
    """ZipInfo that can carry a pre-encoded filename."""

    __slots__ = ("encoded_name",)

    def __init__(self, filename, date_time, encoded_name: bytes | None = None):
        super().__init__(filename, date_time)
        self.encoded_name = encoded_name

    # Private zipfile hook, called for both the local and the central header.
    # Checked against CPython 3.11 to 3.13.
    def _encodeFilenameFlags(self):
        if self.encoded_name is None:
            return super()._encodeFilenameFlags()
        return self.encoded_name, self.flag_bits & ~UTF8_NAME_FLAG


def zip_date_time(timestamp: float) -> tuple:
    date_time = time.localtime(timestamp)[:6]
    if date_time[0] < 1980:
        return (1980, 1, 1, 0, 0, 0)
    return date_time


class ArchiveWriter:
    """One ZIP archive being written.

    Use as a context manager; the archive is finalized and the file
    descriptor released whether the block exits normally or raises.
    """

    def __init__(self, path):
        self.path = os.fspath(path)
        self._fp = None
        self._zip = None
        self.members_written = 0

    @property
    def is_open(self) -> bool:
        return self._fp is not None

    def open(self) -> "ArchiveWriter":
        if self._fp is not None:
            raise ValueError(f"{self.path} is already open")
        fp = open(self.path, "wb")
        try:
            self._zip = zipfile.ZipFile(fp, "w", compression=zipfile.ZIP_DEFLATED)
        except BaseException:
            fp.close()
            raise
        self._fp = fp
        logger.debug("opened %s", self.path)
        return self

    def write_member(self, member: ArchiveMember, stream: BinaryIO) -> None:
        if self._zip is None:
            raise ValueError(f"{self.path} is not open")

        if member.non_utf8:
            filename = member.logical_name
            encoded = member.name
            if not isinstance(encoded, bytes):
                encoded = encoded.encode("utf-8")
        else:
            filename = member.name
            if isinstance(filename, bytes):
                filename = filename.decode("utf-8")
            encoded = None
        info = MemberInfo(filename, zip_date_time(member.modified_time), encoded)
        info.compress_type = member.compression
        if member.mode is not None:
            info.external_attr = (stat.S_IFREG | stat.S_IMODE(member.mode)) << 16
        if member.size is not None:
            info.file_size = member.size

        with self._zip.open(info, "w") as dest:
            shutil.copyfileobj(stream, dest, CHUNK_SIZE)
        self.members_written += 1

    def close(self) -> None:
        """Write the central directory and close the file; safe to repeat."""
        zf, fp = self._zip, self._fp
        self._zip = self._fp = None
        if fp is None:
            return
        try:
            if zf is not None:
                zf.close()
        finally:
            fp.close()
            logger.debug("closed %s (%d members)", self.path, self.members_written)

    def __enter__(self):
        if self._fp is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
