from __future__ import annotations

import logging
import os
import platform
from dataclasses import dataclass
from typing import Optional

from .command import CommandRunner

logger = logging.getLogger(__name__)

NVIDIA_PCI_VENDOR = "10de"


def normalize_arch(machine: str) -> str:
    m = machine.lower()
    return {
        "x86_64": "x86_64",
        "amd64": "x86_64",
        "aarch64": "aarch64",
        "arm64": "aarch64",
    }.get(m, m)


def cpu_count() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class GpuInfo:
    present: bool
    driver_version: Optional[str] = None


def _lspci_has_nvidia(stdout: str) -> bool:
    for line in stdout.splitlines():
        low = line.lower()
        if "nvidia" in low or f"[{NVIDIA_PCI_VENDOR}:" in low:
            return True
    return False


def query_driver_version(runner: CommandRunner) -> Optional[str]:
    """Driver version reported by nvidia-smi, or None when unavailable."""

    r = runner.query(["nvidia-smi", "--query-gpu=driver_version", "--format=csv,noheader"])
    if r.returncode != 0:
        return None
    lines = [ln.strip() for ln in r.stdout.splitlines() if ln.strip()]
    return lines[0] if lines else None


def detect_gpu(runner: CommandRunner) -> GpuInfo:
    """Look for an NVIDIA device on the PCI bus.

    A GPU without a working driver is a warning, never an error.
    """

    r = runner.query(["lspci", "-nn"])
    if r.returncode != 0 or not _lspci_has_nvidia(r.stdout):
        logger.warning("No NVIDIA GPU detected, installing CPU-only versions")
        return GpuInfo(present=False)

    driver = query_driver_version(runner)
    if driver:
        logger.info("NVIDIA GPU detected with driver version: %s", driver)
    else:
        logger.warning("NVIDIA GPU detected but no drivers installed")
    return GpuInfo(present=True, driver_version=driver)


def detect_arch() -> str:
    return normalize_arch(platform.machine())
