# ripgrep/files.py
from __future__ import annotations

import errno
import subprocess
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from loguru import logger

from .lines import LineSplitter
from .provision import RipgrepProvisioner

EXCLUDE_GIT_GLOB = "--glob=!.git/*"
READ_CHUNK = 64 * 1024


def build_files_args(
    rg_path: str,
    glob: Optional[Iterable[str]] = None,
    hidden: bool = True,
    follow: bool = True,
    max_depth: Optional[int] = None,
) -> List[str]:
    args = [rg_path, "--files", EXCLUDE_GIT_GLOB]
    if follow is not False:
        args.append("--follow")
    if hidden is not False:
        args.append("--hidden")
    if max_depth is not None:
        args.append(f"--max-depth={max_depth}")
    for g in glob or ():
        args.append(f"--glob={g}")
    return args


def iter_files(
    provisioner: RipgrepProvisioner,
    cwd,
    glob: Optional[Iterable[str]] = None,
    hidden: bool = True,
    follow: bool = True,
    max_depth: Optional[int] = None,
) -> Iterator[str]:
    """
    Return a lazy sequence of file paths under `cwd` (relative to it), as
    ripgrep reports them.

    A missing or non-directory `cwd` raises FileNotFoundError right here,
    before any process is spawned. Each call starts a fresh listing.
    """
    root = Path(cwd)
    # Popen reports a bad cwd from the child on some platforms; check up front.
    if not root.is_dir():
        raise FileNotFoundError(errno.ENOENT, "No such file or directory", str(cwd))

    args = build_files_args(provisioner.resolve(), glob=glob, hidden=hidden, follow=follow, max_depth=max_depth)
    return _stream_lines(args, root)


def _stream_lines(args: List[str], cwd: Path) -> Iterator[str]:
    """
    Run `args` in `cwd` and yield stdout lines as they arrive.

    The generator owns the child process: exhausting it, raising inside the
    consumer, or closing it early all close the pipe and reap the process.
    """
    logger.debug("ripgrep files: cwd='{}' args={}", str(cwd), args[1:])
    proc = subprocess.Popen(
        args, cwd=str(cwd), stdin=subprocess.DEVNULL, stdout=subprocess.PIPE, stderr=subprocess.DEVNULL
    )
    splitter = LineSplitter()
    count = 0
    try:
        while True:
            chunk = proc.stdout.read1(READ_CHUNK)
            if not chunk:
                break
            for line in splitter.feed(chunk):
                count += 1
                yield line
        for line in splitter.close():
            count += 1
            yield line
    finally:
        proc.stdout.close()
        returncode = proc.wait()
        logger.debug("ripgrep files: yielded={} exit={}", count, returncode)
