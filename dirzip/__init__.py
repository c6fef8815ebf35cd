"""Compress each directory to its own ZIP file."""

__version__ = "1.0.0"

from .batch import BatchDriver, BatchResult, run_batch
from .charset import CodecTranscoder, PassthroughTranscoder, select_transcoder, transcode
from .config import ArchiveConfig, BatchMode, EmptyPolicy, RootNaming
from .errors import ConfigError, ConflictError, DirzipError, EncodingError
from .job import ArchiveJobRunner, DirectoryJob, JobResult, JobState
from .overwrite import prompt_yes_no, should_proceed
from .walker import WalkEntry, walk
from .writer import ArchiveMember, ArchiveWriter

__all__ = [
    "ArchiveConfig",
    "ArchiveJobRunner",
    "ArchiveMember",
    "ArchiveWriter",
    "BatchDriver",
    "BatchMode",
    "BatchResult",
    "CodecTranscoder",
    "ConfigError",
    "ConflictError",
    "DirectoryJob",
    "DirzipError",
    "EmptyPolicy",
    "EncodingError",
    "JobResult",
    "JobState",
    "PassthroughTranscoder",
    "RootNaming",
    "WalkEntry",
    "prompt_yes_no",
    "run_batch",
    "select_transcoder",
    "should_proceed",
    "transcode",
    "walk",
]
