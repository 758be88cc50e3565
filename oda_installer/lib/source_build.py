from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .command import CommandRunner

logger = logging.getLogger(__name__)


def git_clone(
    runner: CommandRunner,
    url: str,
    dest: str,
    *,
    recursive: bool = False,
    ref: Optional[str] = None,
) -> None:
    argv = ["git", "clone"]
    if recursive:
        argv.append("--recursive")
    runner.run([*argv, url, dest])
    if ref:
        runner.run(["git", "checkout", ref], cwd=dest)


def cmake_build(
    runner: CommandRunner,
    src_dir: str,
    *,
    jobs: int,
    defines: Mapping[str, str] | None = None,
    build_subdir: str = "build",
    sudo_install: bool = False,
    dry_run: bool = False,
) -> str:
    """Configure with CMake in <src>/<build_subdir>, compile with all cores.

    Returns the build directory.
    """

    build_dir = str(Path(src_dir) / build_subdir)
    if not dry_run:
        Path(build_dir).mkdir(parents=True, exist_ok=True)
    flags = [f"-D{k}={v}" for k, v in (defines or {}).items()]
    runner.run(["cmake", *flags, ".."], cwd=build_dir)
    runner.run(["make", f"-j{jobs}"], cwd=build_dir)
    if sudo_install:
        runner.run(["sudo", "make", "install"], cwd=build_dir)
    return build_dir


def make_build(runner: CommandRunner, src_dir: str, *, jobs: int, variables: Sequence[str] = ()) -> None:
    runner.run(["make", f"-j{jobs}", *variables], cwd=src_dir)
