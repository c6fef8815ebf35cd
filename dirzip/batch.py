from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .config import ArchiveConfig, BatchMode, EmptyPolicy
from .errors import ConfigError, ConflictError
from .job import ArchiveJobRunner, DirectoryJob, JobResult
from .overwrite import Confirm, ask, prompt_yes_no

logger = logging.getLogger(__name__)

CREATE_DESTINATION_PROMPT = "The output directory does not exist. Create? (y/N) "


def ensure_destination(destination, forced: bool, confirm: Confirm) -> None:
    """Make sure the output directory exists, creating it if allowed."""
    destination = os.fspath(destination)
    if os.path.isdir(destination):
        return
    if os.path.lexists(destination):
        raise ConflictError(destination, f"output path {destination} is not a directory")
    if not forced and not ask(confirm, CREATE_DESTINATION_PROMPT, False):
        raise ConfigError(f"output directory {destination} does not exist")
    os.makedirs(destination, exist_ok=True)
    logger.info("created output directory %s", destination)


def is_empty_dir(path) -> bool:
    with os.scandir(path) as it:
        return next(it, None) is None


def child_directories(path) -> list[str]:
    with os.scandir(path) as it:
        return sorted(entry.path for entry in it if entry.is_dir())


def check_target(path) -> None:
    """Raise unless path is an existing directory."""
    st = os.stat(path)
    if not stat.S_ISDIR(st.st_mode):
        raise ConfigError(f"{os.fspath(path)} is not a directory")


@dataclass
class BatchResult:
    jobs: list[JobResult] = field(default_factory=list)

    @property
    def created(self) -> list[JobResult]:
        return [r for r in self.jobs if not r.skipped]

    @property
    def skipped(self) -> list[JobResult]:
        return [r for r in self.jobs if r.skipped]


class BatchDriver:
    """Runs one job per target (or per child directory of each target).

    The first job that raises stops the batch; the exception propagates
    unchanged. Skipped jobs do not stop it.
    """

    def __init__(self, config: ArchiveConfig, runner: ArchiveJobRunner | None = None,
                 confirm: Confirm = prompt_yes_no):
        self.config = config
        self.confirm = confirm
        self.runner = runner or ArchiveJobRunner(config, confirm=confirm)
        self._destination_ready = False

    def sources(self, target) -> Iterator[str]:
        check_target(target)
        if self.config.batch_mode is BatchMode.SIMPLE:
            yield os.fspath(target)
            return
        for child in child_directories(target):
            if self.config.empty_policy is EmptyPolicy.SKIP_EMPTY and is_empty_dir(child):
                logger.debug("skipping empty directory %s", child)
                continue
            yield child

    def jobs(self, targets: Iterable) -> Iterator[DirectoryJob]:
        for target in targets:
            for source in self.sources(target):
                yield DirectoryJob.for_directory(source, self.config.destination,
                                                 self.config.root_naming)

    def prepare_destination(self) -> None:
        if self._destination_ready:
            return
        ensure_destination(self.config.destination, self.config.force, self.confirm)
        self._destination_ready = True

    def run_batch(self, targets: Iterable) -> BatchResult:
        result = BatchResult()
        for job in self.jobs(targets):
            self.prepare_destination()
            result.jobs.append(self.runner.run(job))
        logger.debug("batch finished: %d created, %d skipped",
                     len(result.created), len(result.skipped))
        return result


def run_batch(targets: Iterable, config: ArchiveConfig, **kwargs) -> BatchResult:
    return BatchDriver(config, **kwargs).run_batch(targets)
