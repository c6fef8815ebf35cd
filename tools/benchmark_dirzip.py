#!/usr/bin/env python3
"""
Benchmark dirzip against the system zip.

Each dataset is generated into its own directory and archived once per
iteration by `python -m dirzip -q -o` and, when available, by `zip -qr`.
The best time of the iterations is reported together with archive sizes.

Usage:
    ./tools/benchmark_dirzip.py [--datasets NAME ...] [--iterations N] [--output <file>]

Options:
    --datasets      Subset of: source, logs, binary, media (default: all)
    --iterations    Runs per tool and dataset, best time wins (default: 3)
    --output <file> Write detailed results as JSON to the specified file

Environment variables:
    SYSTEM_ZIP: path to system zip executable (default 'zip')
    DIRZIP_BIN: command used to run dirzip (default '<python> -m dirzip')
"""

import argparse
import json
import os
import random
import shlex
import shutil
import subprocess
import sys
import tempfile
import time
import zipfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, List, Optional

REPO_ROOT = Path(__file__).resolve().parents[1]


@dataclass
class BenchmarkResult:
    dataset: str
    files: int
    dirzip_time: float
    dirzip_size: int
    system_time: Optional[float]
    system_size: Optional[int]
    speedup: Optional[float]  # system_time / dirzip_time
    size_ratio: Optional[float]  # system_size / dirzip_size


# --- Dataset Generators ---

def create_source_code_dataset(root: Path):
    """Many small text files in nested directories."""
    code_snippets = [
        "import sys\nimport os\n\ndef main():\n    print('hello')\n",
        "#include <stdio.h>\nint main() { return 0; }\n",
        "const x = 1;\nfunction test() { return true; }\n",
    ]
    for i in range(50):
        d = root / f"dir_{i % 5}" / f"pkg_{i % 3}"
        d.mkdir(parents=True, exist_ok=True)
        (d / f"module_{i}.py").write_text(random.choice(code_snippets) * random.randint(1, 10))


def create_log_dataset(root: Path):
    """Large, highly compressible text."""
    line = "2025-01-01 12:00:00 [INFO] Request ID: 12345 received from IP 192.168.1.1\n"
    for i in range(3):
        (root / f"server_{i}.log").write_text(line * 50000)


def create_binary_dataset(root: Path):
    """Random bytes, incompressible."""
    for i in range(3):
        (root / f"data_{i}.dat").write_bytes(os.urandom(2 * 1024 * 1024))


def create_media_dataset(root: Path):
    """Moderate size files, mostly incompressible."""
    for i in range(10):
        (root / f"image_{i}.jpg").write_bytes(os.urandom(500 * 1024))


DATASETS = {
    "source": create_source_code_dataset,
    "logs": create_log_dataset,
    "binary": create_binary_dataset,
    "media": create_media_dataset,
}


def dirzip_cmd() -> List[str]:
    cmd = os.environ.get("DIRZIP_BIN")
    if cmd:
        return shlex.split(cmd)
    return [sys.executable, "-m", "dirzip"]


def best_time(cmd: List[str], cwd: Path, archive: Path, iterations: int) -> float:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))
    times = []
    for _ in range(iterations):
        if archive.exists():
            archive.unlink()
        start = time.perf_counter()
        res = subprocess.run(cmd, cwd=str(cwd), env=env, stdout=subprocess.DEVNULL,
                             stderr=subprocess.PIPE, text=True)
        times.append(time.perf_counter() - start)
        if res.returncode != 0:
            raise SystemExit(f"{' '.join(cmd)} failed: {res.stderr}")
    return min(times)


class DirzipBenchmark:
    def __init__(self, system_zip: Optional[str], iterations: int = 3):
        self.system_zip = system_zip
        self.iterations = max(1, iterations)

    def run_benchmark(self, name: str, generator: Callable[[Path], None], work: Path) -> BenchmarkResult:
        src = work / name
        src.mkdir()
        generator(src)
        files = sum(1 for p in src.rglob("*") if p.is_file())

        out = work / "out"
        out.mkdir(exist_ok=True)
        dz_archive = out / f"{name}.zip"
        dz_time = best_time(dirzip_cmd() + ["-q", "-o", "-d", str(out), name], work, dz_archive,
                            self.iterations)
        dz_size = dz_archive.stat().st_size
        with zipfile.ZipFile(dz_archive) as zf:
            if len(zf.namelist()) != files:
                raise SystemExit(f"{name}: dirzip stored {len(zf.namelist())} of {files} files")

        sys_time = sys_size = None
        if self.system_zip:
            sys_archive = work / f"{name}.system.zip"
            sys_time = best_time([self.system_zip, "-qr", str(sys_archive), name], work, sys_archive,
                                 self.iterations)
            sys_size = sys_archive.stat().st_size

        return BenchmarkResult(
            dataset=name,
            files=files,
            dirzip_time=dz_time,
            dirzip_size=dz_size,
            system_time=sys_time,
            system_size=sys_size,
            speedup=(sys_time / dz_time) if sys_time and dz_time > 0 else None,
            size_ratio=(sys_size / dz_size) if sys_size and dz_size > 0 else None,
        )

    def run_suite(self, names: List[str]) -> List[BenchmarkResult]:
        results = []
        with tempfile.TemporaryDirectory() as tmp:
            work = Path(tmp)
            for name in names:
                print(f"Benchmark {name}...", file=sys.stderr)
                results.append(self.run_benchmark(name, DATASETS[name], work))
        return results


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Benchmark dirzip against the system zip")
    parser.add_argument("--datasets", nargs="+", choices=sorted(DATASETS), default=list(DATASETS))
    parser.add_argument("--iterations", type=int, default=3)
    parser.add_argument("--output", type=str)
    args = parser.parse_args(argv)

    system_zip = shutil.which(os.environ.get("SYSTEM_ZIP", "zip"))
    if not system_zip:
        print("System zip not found; timing dirzip only.", file=sys.stderr)

    res = DirzipBenchmark(system_zip, args.iterations).run_suite(args.datasets)

    print(f"\n{'Dataset':<8} | {'Files':<5} | {'dirzip':<8} | {'System':<8} | {'Speedup':<7} | {'Size Ratio':<10}",
          file=sys.stderr)
    print("-" * 65, file=sys.stderr)
    for r in res:
        sys_t = f"{r.system_time:.3f}s" if r.system_time is not None else "-"
        speedup = f"{r.speedup:.2f}x" if r.speedup is not None else "-"
        ratio = f"{r.size_ratio:.3f}" if r.size_ratio is not None else "-"
        print(f"{r.dataset:<8} | {r.files:<5} | {r.dirzip_time:.3f}s   | {sys_t:<8} | {speedup:<7} | {ratio}",
              file=sys.stderr)

    if args.output:
        with open(args.output, "w") as f:
            json.dump({"performance": [asdict(r) for r in res]}, f, indent=2)
        print(f"\nSaved results to {args.output}", file=sys.stderr)


if __name__ == "__main__":
    main()
