"""
One directory -> one archive.

ArchiveJobRunner moves a DirectoryJob through

    START -> OUTPUT_PATH_RESOLVED -> OVERWRITE_CHECKED -> WRITER_OPEN
          -> WALK_STREAMING -> CLOSED

ending in SKIPPED when the overwrite policy declines (no writer is opened)
or ABORTED when the overwrite check or anything after it fails. An aborted
job always closes its writer before the original exception is re-raised.
Cleanup notes from an aborted job are logged at info level, so stderr only
carries the error line the CLI prints.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, TextIO

from .charset import PassthroughTranscoder
from .config import ARCHIVE_SUFFIX, ArchiveConfig, RootNaming
from .errors import ConfigError
from .overwrite import Confirm, prompt_yes_no, should_proceed
from .walker import walk
from .writer import ArchiveMember, ArchiveWriter

logger = logging.getLogger(__name__)


class JobState(Enum):
    START = "start"
    OUTPUT_PATH_RESOLVED = "output-path-resolved"
    OVERWRITE_CHECKED = "overwrite-checked"
    WRITER_OPEN = "writer-open"
    WALK_STREAMING = "walk-streaming"
    CLOSED = "closed"
    SKIPPED = "skipped"
    ABORTED = "aborted"


def source_base_name(source) -> str:
    """Base name of a source directory, ignoring trailing separators."""
    name = os.path.basename(os.path.abspath(os.fspath(source)))
    if not name:
        raise ConfigError(f"cannot derive an archive name from {os.fspath(source)!r}")
    return name


def archive_path_for(source, destination) -> str:
    return os.path.join(os.fspath(destination), source_base_name(source) + ARCHIVE_SUFFIX)


@dataclass(frozen=True)
class DirectoryJob:
    source_path: str
    destination_path: str
    root_naming: RootNaming = RootNaming.KEEP_ROOT

    @classmethod
    def for_directory(cls, source, destination_dir, root_naming: RootNaming) -> "DirectoryJob":
        return cls(os.fspath(source), archive_path_for(source, destination_dir), root_naming)

    @property
    def archive_prefix(self) -> str:
        if self.root_naming is RootNaming.KEEP_ROOT:
            return source_base_name(self.source_path)
        return ""


@dataclass
class JobResult:
    job: DirectoryJob
    state: JobState
    members: int = 0
    elapsed: float = 0.0

    @property
    def skipped(self) -> bool:
        return self.state is JobState.SKIPPED


class ArchiveJobRunner:
    def __init__(
        self,
        config: ArchiveConfig,
        transcoder=None,
        confirm: Confirm = prompt_yes_no,
        out: TextIO | None = None,
        on_state: Callable[[DirectoryJob, JobState], None] | None = None,
    ):
        self.config = config
        self.transcoder = transcoder or PassthroughTranscoder()
        self.confirm = confirm
        self.out = out
        self.on_state = on_state

    def echo(self, text: str = "") -> None:
        if not self.config.quiet:
            print(text, file=self.out, flush=True)

    def _enter(self, job: DirectoryJob, state: JobState) -> JobState:
        logger.debug("%s: %s", job.source_path, state.value)
        if self.on_state is not None:
            self.on_state(job, state)
        return state

    def run(self, job: DirectoryJob) -> JobResult:
        started = time.perf_counter()
        state = self._enter(job, JobState.START)
        target = job.destination_path
        state = self._enter(job, JobState.OUTPUT_PATH_RESOLVED)

        try:
            proceed = should_proceed(target, self.config.force, self.confirm)
        except BaseException as exc:
            self._enter(job, JobState.ABORTED)
            logger.debug("aborted %s: %s", target, exc)
            raise
        if not proceed:
            logger.info("skipped: %s", target)
            state = self._enter(job, JobState.SKIPPED)
            return JobResult(job, state, elapsed=time.perf_counter() - started)
        state = self._enter(job, JobState.OVERWRITE_CHECKED)

        writer = ArchiveWriter(target)
        try:
            writer.open()
            state = self._enter(job, JobState.WRITER_OPEN)
            self.echo(f"Creating {target}")
            logger.info("creating: %s", target)

            state = self._enter(job, JobState.WALK_STREAMING)
            own_path = os.path.realpath(target)
            for entry in walk(job.source_path, job.archive_prefix):
                if entry.is_directory:
                    continue
                if os.path.realpath(entry.disk_path) == own_path:
                    # never archive the archive being written
                    continue
                self._add_file(writer, entry.disk_path, entry.archive_path)
        except BaseException as exc:
            try:
                writer.close()
            except OSError as close_exc:
                logger.info("could not finalize %s: %s", target, close_exc)
            self._enter(job, JobState.ABORTED)
            logger.debug("aborted %s: %s", target, exc)
            if self.config.remove_partial and os.path.isfile(target):
                os.remove(target)
                logger.info("removed incomplete archive %s", target)
            raise

        writer.close()
        state = self._enter(job, JobState.CLOSED)
        self.echo()
        return JobResult(job, state, writer.members_written, time.perf_counter() - started)

    def _add_file(self, writer: ArchiveWriter, disk_path: str, archive_path: str) -> None:
        name, non_utf8 = self.transcoder.transcode(archive_path)
        with open(disk_path, "rb") as src:
            st = os.fstat(src.fileno())
            member = ArchiveMember(
                name=name,
                logical_name=archive_path,
                modified_time=time.time(),
                non_utf8=non_utf8,
                size=st.st_size,
                mode=st.st_mode,
            )
            self.echo(disk_path)
            writer.write_member(member, src)
        logger.info("adding: %s", archive_path)
