from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional

from ..config import InstallerConfig
from ..errors import InsufficientDiskError, NetworkUnavailableError, PrivilegeError
from .command import CommandRunner
from .distro import OS_RELEASE_PATH, DistroFamily, detect_distribution
from .hwdetect import cpu_count, detect_arch, detect_gpu
from .net import is_online
from .storage import free_disk_gb

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SystemProfile:
    """Everything the installation steps may know about the host.

    Computed once before any step runs and never mutated afterwards.
    """

    distro_family: DistroFamily
    distro_id: str
    distro_version: str
    has_gpu: bool
    gpu_driver_version: Optional[str]
    free_disk_gb: int
    is_root: bool
    arch: str = "x86_64"
    cpus: int = 1

    @property
    def distro_major(self) -> int:
        return int(self.distro_version.split(".", 1)[0])

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["distro_family"] = self.distro_family.value
        return d


def _is_root() -> bool:
    return os.geteuid() == 0


def probe_system(
    runner: CommandRunner,
    cfg: InstallerConfig,
    *,
    os_release_path: str = OS_RELEASE_PATH,
    is_root: Callable[[], bool] = _is_root,
    disk_free: Callable[[str], int] = free_disk_gb,
    arch: Optional[str] = None,
) -> SystemProfile:
    """Detect distro, GPU and resources. Unsupported platforms raise here."""

    req = cfg.requirements
    distro = detect_distribution(
        os_release_path,
        min_ubuntu_major=req.min_ubuntu_major,
        min_redhat_major=req.min_redhat_major,
    )
    gpu = detect_gpu(runner)

    profile = SystemProfile(
        distro_family=distro.family,
        distro_id=distro.distro_id,
        distro_version=distro.version,
        has_gpu=gpu.present,
        gpu_driver_version=gpu.driver_version,
        free_disk_gb=disk_free(cfg.paths.home),
        is_root=is_root(),
        arch=arch or detect_arch(),
        cpus=cpu_count(),
    )
    logger.info(
        "System: distro=%s %s gpu=%s free_disk=%sGB arch=%s",
        profile.distro_id,
        profile.distro_version,
        profile.has_gpu,
        profile.free_disk_gb,
        profile.arch,
    )
    return profile


def check_requirements(profile: SystemProfile, runner: CommandRunner, cfg: InstallerConfig) -> None:
    """Refuse to start unless disk, network and privileges are all in order."""

    req = cfg.requirements
    logger.info("Validating system requirements...")

    if profile.free_disk_gb < req.min_free_disk_gb:
        raise InsufficientDiskError(
            f"Insufficient disk space. At least {req.min_free_disk_gb}GB required, "
            f"found {profile.free_disk_gb}GB"
        )

    if not is_online(runner, req.connectivity_host):
        raise NetworkUnavailableError("No internet connection detected")

    if profile.is_root:
        raise PrivilegeError("This script should not be run as root")

    if not runner.which("sudo"):
        raise PrivilegeError("sudo is required but not installed")

    if runner.query(["sudo", "-v"]).returncode != 0:
        raise PrivilegeError("User does not have sudo privileges")

    logger.info("System requirements validated successfully")
