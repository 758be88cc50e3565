from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

from .command import CmdResult, CommandRunner
from .distro import DistroFamily

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageManagerBinding:
    """Concrete install/update/clean commands for one distro family."""

    name: str
    install_cmd: Tuple[str, ...]
    update_cmd: Tuple[str, ...]
    clean_cmd: Tuple[str, ...]
    # dnf check-update exits 100 when updates are available.
    update_ok_codes: Tuple[int, ...] = (0,)
    version_sep: str = "="

    def install(self, runner: CommandRunner, packages: Sequence[str]) -> None:
        if not packages:
            return
        runner.run([*self.install_cmd, *packages])

    def update(self, runner: CommandRunner) -> CmdResult:
        return runner.run(list(self.update_cmd), ok_codes=self.update_ok_codes)

    def clean(self, runner: CommandRunner) -> CmdResult:
        return runner.run(list(self.clean_cmd))

    def pinned(self, package: str, version: str) -> str:
        """Package spec matching any build of `version` (e.g. tensorrt=8.6.1*)."""
        return f"{package}{self.version_sep}{version}*"


_BINDINGS = {
    DistroFamily.UBUNTU: PackageManagerBinding(
        name="apt-get",
        install_cmd=("sudo", "apt-get", "install", "-y"),
        update_cmd=("sudo", "apt-get", "update"),
        clean_cmd=("sudo", "apt-get", "clean"),
    ),
    DistroFamily.REDHAT: PackageManagerBinding(
        name="dnf",
        install_cmd=("sudo", "dnf", "install", "-y"),
        update_cmd=("sudo", "dnf", "check-update"),
        clean_cmd=("sudo", "dnf", "clean", "all"),
        update_ok_codes=(0, 100),
        version_sep="-",
    ),
}


def resolve_package_manager(family: DistroFamily) -> PackageManagerBinding:
    try:
        binding = _BINDINGS[DistroFamily(family)]
    except (KeyError, ValueError):
        # The prober rejects unsupported distros, so reaching here is a bug.
        raise AssertionError(f"No package manager mapped for distro family {family!r}") from None
    logger.info("Package manager: %s", binding.name)
    return binding
