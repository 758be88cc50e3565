from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import Collection, Mapping, Optional, Sequence

from ..errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


class CommandRunner:
    """Single seam through which every external command is executed.

    - Always logs the command.
    - Captures stdout/stderr and logs them at DEBUG.
    - dry_run logs but does not execute.

    Tests substitute a recording fake with the same interface.
    """

    def __init__(self, *, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        ok_codes: Collection[int] = (0,),
        env: Mapping[str, str] | None = None,
        cwd: str | None = None,
        input_text: str | None = None,
    ) -> CmdResult:
        argv_list = [str(a) for a in argv]
        logger.info("CMD %s", fmt_argv(argv_list))

        if self.dry_run:
            return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

        return self._execute(argv_list, check=check, ok_codes=ok_codes, env=env, cwd=cwd, input_text=input_text)

    def _execute(
        self,
        argv_list: list[str],
        *,
        check: bool,
        ok_codes: Collection[int],
        env: Mapping[str, str] | None = None,
        cwd: str | None = None,
        input_text: str | None = None,
    ) -> CmdResult:
        try:
            p = subprocess.run(
                argv_list,
                input=input_text,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=cwd,
                env=dict(os.environ, **(env or {})),
            )
        except FileNotFoundError as e:
            if check:
                raise CommandError(argv_list, 127, str(e)) from e
            return CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))

        if p.stdout:
            logger.debug("STDOUT %s", p.stdout.strip())
        if p.stderr:
            logger.debug("STDERR %s", p.stderr.strip())

        if check and p.returncode not in ok_codes:
            raise CommandError(argv_list, p.returncode, p.stderr or "")

        return CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)

    def query(self, argv: Sequence[str]) -> CmdResult:
        """Read-only probe: executes even in dry-run and never raises on failure."""
        argv_list = [str(a) for a in argv]
        logger.debug("QUERY %s", fmt_argv(argv_list))
        return self._execute(argv_list, check=False, ok_codes=(0,))

    def shell(self, script: str, *, check: bool = True, cwd: str | None = None) -> CmdResult:
        """Run a pipeline through `sh -c` (for `curl ... | gpg ...` style recipes)."""
        return self.run(["sh", "-c", script], check=check, cwd=cwd)

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)
