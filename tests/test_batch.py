#!/usr/bin/env python3

import io
import tempfile
import zipfile
from pathlib import Path

from dirzip.batch import BatchDriver, ensure_destination, run_batch
from dirzip.config import ArchiveConfig
from dirzip.errors import ConfigError, ConflictError
from dirzip.job import ArchiveJobRunner, JobState


class Answers:
    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []

    def __call__(self, prompt, default):
        self.prompts.append(prompt)
        if not self.answers:
            raise SystemExit(f"unexpected prompt: {prompt}")
        return self.answers.pop(0)


def driver(config, confirm):
    runner = ArchiveJobRunner(config, confirm=confirm, out=io.StringIO())
    return BatchDriver(config, runner=runner, confirm=confirm)


def make_parent(root: Path) -> Path:
    parent = root / "parent"
    (parent / "one").mkdir(parents=True)
    (parent / "one" / "1.txt").write_text("1")
    (parent / "two" / "nested").mkdir(parents=True)
    (parent / "two" / "nested" / "2.txt").write_text("2")
    (parent / "E").mkdir()
    (parent / "loose.txt").write_text("not a directory")
    return parent


def test_iterate_children_skips_empty():
    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)
        parent = make_parent(tmp_path)
        out = tmp_path / "out"
        out.mkdir()
        config = ArchiveConfig(iterate_subdirectories=True, destination=out)

        result = driver(config, Answers()).run_batch([parent])

        produced = sorted(p.name for p in out.iterdir())
        if produced != ["one.zip", "two.zip"]:
            raise SystemExit(f"unexpected archives {produced}")
        if len(result.created) != 2 or result.skipped:
            raise SystemExit(f"unexpected result {result}")
        with zipfile.ZipFile(out / "two.zip") as zf:
            if zf.namelist() != ["two/nested/2.txt"]:
                raise SystemExit(f"names mismatch: {zf.namelist()}")


def test_iterate_children_include_empty():
    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)
        parent = make_parent(tmp_path)
        out = tmp_path / "out"
        out.mkdir()
        config = ArchiveConfig(iterate_subdirectories=True, include_empty=True,
                               omit_root_name=True, destination=out)

        run_batch([parent], config, runner=ArchiveJobRunner(config, out=io.StringIO()),
                  confirm=Answers())

        produced = sorted(p.name for p in out.iterdir())
        if produced != ["E.zip", "one.zip", "two.zip"]:
            raise SystemExit(f"unexpected archives {produced}")
        with zipfile.ZipFile(out / "E.zip") as zf:
            if zf.namelist():
                raise SystemExit("archive of an empty directory has members")


def test_simple_mode_one_archive_per_target():
    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)
        parent = make_parent(tmp_path)
        out = tmp_path / "out"
        out.mkdir()
        config = ArchiveConfig(destination=out)

        driver(config, Answers()).run_batch([parent / "one", parent / "E"])

        produced = sorted(p.name for p in out.iterdir())
        if produced != ["E.zip", "one.zip"]:
            raise SystemExit(f"unexpected archives {produced}")


def test_destination_created_when_forced():
    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)
        parent = make_parent(tmp_path)
        out = tmp_path / "new" / "out"
        config = ArchiveConfig(force=True, destination=out)

        driver(config, Answers()).run_batch([parent / "one"])
        if not (out / "one.zip").is_file():
            raise SystemExit("forced run did not create the destination")


def test_destination_creation_confirmed_once():
    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)
        parent = make_parent(tmp_path)
        out = tmp_path / "out"
        confirm = Answers(True)
        config = ArchiveConfig(iterate_subdirectories=True, destination=out)

        driver(config, confirm).run_batch([parent])
        if len(confirm.prompts) != 1 or "Create?" not in confirm.prompts[0]:
            raise SystemExit(f"unexpected prompts {confirm.prompts}")
        if sorted(p.name for p in out.iterdir()) != ["one.zip", "two.zip"]:
            raise SystemExit("archives missing after confirmed creation")


def test_destination_creation_declined_stops():
    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)
        parent = make_parent(tmp_path)
        out = tmp_path / "out"
        config = ArchiveConfig(destination=out)
        try:
            driver(config, Answers(False)).run_batch([parent / "one"])
        except ConfigError:
            pass
        else:
            raise SystemExit("declined destination creation did not stop the batch")
        if out.exists():
            raise SystemExit("destination created after being declined")


def test_destination_not_needed_without_jobs():
    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)
        (tmp_path / "parent" / "E").mkdir(parents=True)
        out = tmp_path / "out"
        config = ArchiveConfig(iterate_subdirectories=True, destination=out)
        result = driver(config, Answers()).run_batch([tmp_path / "parent"])
        if result.jobs or out.exists():
            raise SystemExit("no jobs should mean no destination")


def test_destination_file_is_a_conflict():
    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)
        (tmp_path / "out").write_text("file")
        try:
            ensure_destination(tmp_path / "out", True, Answers())
        except ConflictError:
            pass
        else:
            raise SystemExit("file destination accepted")


def test_first_failure_halts_batch():
    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)
        parent = make_parent(tmp_path)
        out = tmp_path / "out"
        out.mkdir()
        (out / "one.zip").mkdir()
        config = ArchiveConfig(destination=out, force=True)
        try:
            driver(config, Answers()).run_batch([parent / "E", parent / "one", parent / "two"])
        except ConflictError:
            pass
        else:
            raise SystemExit("conflict did not stop the batch")
        if not (out / "E.zip").is_file():
            raise SystemExit("archive before the failure is missing")
        if (out / "two.zip").exists():
            raise SystemExit("batch continued after the failure")


def test_skipped_job_does_not_halt_batch():
    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)
        parent = make_parent(tmp_path)
        out = tmp_path / "out"
        out.mkdir()
        (out / "one.zip").write_bytes(b"keep")
        config = ArchiveConfig(iterate_subdirectories=True, destination=out)

        result = driver(config, Answers(False)).run_batch([parent])
        states = [r.state for r in result.jobs]
        if states != [JobState.SKIPPED, JobState.CLOSED]:
            raise SystemExit(f"unexpected states {states}")
        if (out / "one.zip").read_bytes() != b"keep":
            raise SystemExit("skipped archive was modified")
        if not (out / "two.zip").is_file():
            raise SystemExit("batch stopped after a skipped job")


def test_bad_targets():
    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)
        parent = make_parent(tmp_path)
        config = ArchiveConfig(destination=tmp_path)
        try:
            driver(config, Answers()).run_batch([parent / "loose.txt"])
        except ConfigError as exc:
            if "is not a directory" not in str(exc):
                raise SystemExit(f"unexpected message {exc}")
        else:
            raise SystemExit("file target accepted")
        try:
            driver(config, Answers()).run_batch([tmp_path / "missing"])
        except FileNotFoundError:
            pass
        else:
            raise SystemExit("missing target accepted")


def main():
    test_iterate_children_skips_empty()
    test_iterate_children_include_empty()
    test_simple_mode_one_archive_per_target()
    test_destination_created_when_forced()
    test_destination_creation_confirmed_once()
    test_destination_creation_declined_stops()
    test_destination_not_needed_without_jobs()
    test_destination_file_is_a_conflict()
    test_first_failure_halts_batch()
    test_skipped_job_does_not_halt_batch()
    test_bad_targets()


if __name__ == "__main__":
    main()
