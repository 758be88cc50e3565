from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence, TextIO

from .lib.command import CommandRunner
from .lib.hwdetect import query_driver_version
from .lib.probe import SystemProfile
from .logging_utils import use_color

logger = logging.getLogger(__name__)

NOT_FOUND = "Not found"

_BLUE = "\033[0;34m"
_GREEN = "\033[0;32m"
_RESET = "\033[0m"

START_BANNER = [
    "╔═══════════════════════════════════════════╗",
    "║               ODA Installer               ║",
    "║     On Device AI Development Setup        ║",
    "╚═══════════════════════════════════════════╝",
]

DONE_BANNER = [
    "╔═══════════════════════════════════════════╗",
    "║        Installation Complete! 🎉          ║",
    "╚═══════════════════════════════════════════╝",
]

_CUDA_RELEASE = re.compile(r"release\s+([0-9][0-9.]*)")


@dataclass(frozen=True)
class ComponentVersion:
    name: str
    version: str


def _first_line(runner: CommandRunner, argv: Sequence[str]) -> Optional[str]:
    r = runner.query(argv)
    if r.returncode != 0:
        return None
    # Older interpreters print --version on stderr.
    text = (r.stdout or r.stderr or "").strip()
    return text.splitlines()[0].strip() if text else None


def cuda_release(runner: CommandRunner) -> Optional[str]:
    r = runner.query(["nvcc", "--version"])
    if r.returncode != 0:
        return None
    m = _CUDA_RELEASE.search(r.stdout or "")
    return m.group(1) if m else None


def collect_versions(runner: CommandRunner, profile: SystemProfile) -> List[ComponentVersion]:
    """Informational only: a missing component reads "Not found"."""

    out = [
        ComponentVersion("Python", _first_line(runner, ["python3", "--version"]) or NOT_FOUND),
        ComponentVersion("Docker", _first_line(runner, ["docker", "--version"]) or NOT_FOUND),
    ]
    if profile.has_gpu:
        out.append(ComponentVersion("NVIDIA Driver", query_driver_version(runner) or NOT_FOUND))
        out.append(ComponentVersion("CUDA", cuda_release(runner) or NOT_FOUND))
    return out


class Reporter:
    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream or sys.stdout
        self.color = use_color(self.stream)

    def _paint(self, text: str, color: str) -> str:
        return f"{color}{text}{_RESET}" if self.color else text

    def _write(self, line: str = "") -> None:
        self.stream.write(line + "\n")

    def banner(self, lines: Sequence[str] = START_BANNER) -> None:
        for line in lines:
            self._write(self._paint(line, _BLUE))

    def summary(
        self,
        *,
        venv_dir: str,
        log_path: str,
        versions: Sequence[ComponentVersion],
    ) -> None:
        self.banner(DONE_BANNER)
        logger.info("Installation completed successfully!")
        self._write()
        self._write("To activate the Python environment, run:")
        self._write("    " + self._paint(f"source {venv_dir}/bin/activate", _GREEN))
        self._write()
        self._write("To start using ZSH, run:")
        self._write("    " + self._paint("zsh", _GREEN))
        self._write()
        self._write(f"Installation log is available at: {log_path}")
        self._write()
        self._write("Installed versions:")
        for v in versions:
            self._write(f"{v.name}: {v.version}")
            logger.info("Installed %s: %s", v.name, v.version)


def report_success(
    reporter: Reporter,
    runner: CommandRunner,
    profile: SystemProfile,
    *,
    venv_dir: str,
    log_path: str,
) -> List[ComponentVersion]:
    versions = collect_versions(runner, profile)
    reporter.summary(venv_dir=venv_dir, log_path=log_path, versions=versions)
    return versions
