"""
Compress each directory to a ZIP file.

Usage:
    dirzip [flags] directory [directory...]
    python -m dirzip [flags] directory [directory...]

Every directory argument becomes <outdir>/<name>.zip. With -s, each
immediate subdirectory of the arguments gets its own archive instead and
empty subdirectories are skipped unless -e is given.

Existing archives are only replaced after confirmation on the terminal, or
without asking under -o. With no terminal available the answer is "no".

Environment variables:
    DIRZIP_CHARSET: default for -t
    DIRZIP_DEBUG:   print debug messages to stderr when set

Exit code:
    0 on success, including archives skipped at the overwrite prompt
    1 when a job fails; a single error line is printed on stderr
    2 on usage errors
"""

from __future__ import annotations

import argparse
import glob
import logging
import os
import sys
from pathlib import Path

from . import __version__
from .batch import BatchDriver
from .charset import select_transcoder
from .config import ArchiveConfig, default_charset
from .errors import DirzipError
from .job import ArchiveJobRunner
from .log import LOGGER_NAME, close_logging, setup_logging
from .overwrite import prompt_yes_no

logger = logging.getLogger(LOGGER_NAME)

GLOB_CHARS = set("*?[")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dirzip",
        description="Compress each directory to a ZIP file",
    )
    parser.add_argument("directories", nargs="+", metavar="directory")
    parser.add_argument("-c", "--contents", dest="omit_root_name", action="store_true",
                        help="contents mode; the directory name is omitted in new zip files")
    parser.add_argument("-s", "--subdirs", dest="iterate_subdirectories", action="store_true",
                        help="scan subdirectories of the directories and zip each of them")
    parser.add_argument("-q", "--quiet", action="store_true", help="suppress progress outputs")
    parser.add_argument("-o", "--overwrite", dest="force", action="store_true",
                        help="force; overwrite everything without asking")
    parser.add_argument("-e", "--empty", dest="include_empty", action="store_true",
                        help="create ZIP even for empty subdirectories")
    parser.add_argument("-d", "--outdir", dest="destination", default=".",
                        help="output directory to put created ZIP files (default: .)")
    parser.add_argument("-t", "--charset", default=None,
                        help="codepage of filenames in created zip. WARNING: use only if "
                             "you know exactly what you are doing!")
    parser.add_argument("--remove-partial", action="store_true",
                        help="delete an archive that could not be completed")
    parser.add_argument("-lf", "--logfile-path", dest="log_file", metavar="PATH",
                        help="write warnings and errors to a log file")
    parser.add_argument("-la", "--log-append", action="store_true",
                        help="append to the log file instead of replacing it")
    parser.add_argument("-li", "--log-info", action="store_true",
                        help="include informational messages in the log file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def expand_targets(args: list[str]) -> list[str]:
    """Expand wildcards the shell left alone (e.g. on Windows)."""
    targets: list[str] = []
    for arg in args:
        if not os.path.exists(arg) and GLOB_CHARS & set(arg):
            matches = sorted(glob.glob(arg))
            if matches:
                targets.extend(matches)
                continue
        targets.append(arg)
    return targets


def config_from_args(args: argparse.Namespace) -> ArchiveConfig:
    return ArchiveConfig(
        omit_root_name=args.omit_root_name,
        iterate_subdirectories=args.iterate_subdirectories,
        quiet=args.quiet,
        force=args.force,
        include_empty=args.include_empty,
        destination=Path(args.destination or "."),
        charset=args.charset or default_charset(),
        remove_partial=args.remove_partial,
        log_file=args.log_file,
        log_append=args.log_append,
        log_info=args.log_info,
    )


def run(config: ArchiveConfig, targets: list[str], confirm=prompt_yes_no):
    transcoder = select_transcoder(config.charset)
    runner = ArchiveJobRunner(config, transcoder=transcoder, confirm=confirm)
    return BatchDriver(config, runner=runner, confirm=confirm).run_batch(targets)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = config_from_args(args)

    try:
        setup_logging(config.log_file, config.log_append, config.log_info)
    except OSError as exc:
        print(f"cannot open log file: {exc}", file=sys.stderr)
        return 1

    try:
        run(config, expand_targets(args.directories))
    except (DirzipError, OSError) as exc:
        logger.error("%s", exc)
        print(exc, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.error("interrupted")
        print("interrupted", file=sys.stderr)
        return 130
    finally:
        close_logging()
    return 0

