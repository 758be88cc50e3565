from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import InstallerConfig, Paths, Versions
from .lib.command import CommandRunner
from .lib.distro import DistroFamily
from .lib.pkg import PackageManagerBinding
from .lib.probe import SystemProfile
from .lib.venv import Venv


@dataclass(frozen=True)
class InstallCtx:
    """Read-only inputs shared by every installation step."""

    profile: SystemProfile
    pkg: PackageManagerBinding
    cfg: InstallerConfig
    runner: CommandRunner
    dry_run: bool = False

    @property
    def versions(self) -> Versions:
        return self.cfg.versions

    @property
    def paths(self) -> Paths:
        return self.cfg.paths

    @property
    def is_ubuntu(self) -> bool:
        return self.profile.distro_family is DistroFamily.UBUNTU

    @property
    def has_gpu(self) -> bool:
        return self.profile.has_gpu

    @property
    def venv(self) -> Venv:
        return Venv(self.paths.venv_dir)

    @property
    def python_bin(self) -> str:
        return f"python{self.versions.python}"

    def src_path(self, name: str) -> str:
        return str(Path(self.paths.src_dir) / name)
