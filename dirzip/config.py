from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

UTF8 = "utf-8"
ARCHIVE_SUFFIX = ".zip"
CHARSET_ENV = "DIRZIP_CHARSET"


class RootNaming(Enum):
    OMIT_ROOT = "omit"
    KEEP_ROOT = "keep"


class BatchMode(Enum):
    SIMPLE = "simple"
    ITERATE_CHILDREN = "iterate"


class EmptyPolicy(Enum):
    SKIP_EMPTY = "skip"
    INCLUDE_EMPTY = "include"


def default_charset() -> str:
    return os.environ.get(CHARSET_ENV) or UTF8


@dataclass(frozen=True)
class ArchiveConfig:
    """Options shared by every job of one run.

    Built once from the command line and passed down by reference; nothing
    below the CLI reads flags or environment on its own.
    """
    omit_root_name: bool = False
    iterate_subdirectories: bool = False
    quiet: bool = False
    force: bool = False
    include_empty: bool = False
    destination: Path = field(default_factory=lambda: Path("."))
    charset: str = UTF8
    remove_partial: bool = False
    log_file: Path | None = None
    log_append: bool = False
    log_info: bool = False

    def __post_init__(self):
        # An empty -d means "here", not an error.
        dest = self.destination
        if dest is None or str(dest) == "":
            dest = "."
        object.__setattr__(self, "destination", Path(dest))
        if not self.charset:
            object.__setattr__(self, "charset", UTF8)
        if self.log_file is not None:
            object.__setattr__(self, "log_file", Path(self.log_file))

    @property
    def root_naming(self) -> RootNaming:
        return RootNaming.OMIT_ROOT if self.omit_root_name else RootNaming.KEEP_ROOT

    @property
    def batch_mode(self) -> BatchMode:
        return BatchMode.ITERATE_CHILDREN if self.iterate_subdirectories else BatchMode.SIMPLE

    @property
    def empty_policy(self) -> EmptyPolicy:
        return EmptyPolicy.INCLUDE_EMPTY if self.include_empty else EmptyPolicy.SKIP_EMPTY
