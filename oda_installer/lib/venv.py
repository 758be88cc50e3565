from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .command import CmdResult, CommandRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Venv:
    """A virtual environment driven through its own executables (no activation)."""

    path: str

    @property
    def python(self) -> str:
        return str(Path(self.path) / "bin" / "python")

    @property
    def pip_argv(self) -> list[str]:
        return [self.python, "-m", "pip"]

    def create(self, runner: CommandRunner, interpreter: str) -> None:
        logger.info("Creating virtual environment at %s", self.path)
        runner.run([interpreter, "-m", "venv", self.path])

    def pip_install(
        self,
        runner: CommandRunner,
        requirements: Sequence[str],
        *,
        index_url: Optional[str] = None,
        upgrade: bool = False,
        editable: Optional[str] = None,
        cwd: Optional[str] = None,
    ) -> CmdResult:
        argv = [*self.pip_argv, "install"]
        if upgrade:
            argv.append("--upgrade")
        if index_url:
            argv += ["--index-url", index_url]
        if editable:
            argv += ["-e", editable]
        argv += list(requirements)
        return runner.run(argv, cwd=cwd)
