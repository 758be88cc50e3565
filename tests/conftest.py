from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from oda_installer.config import InstallerConfig, Paths
from oda_installer.context import InstallCtx
from oda_installer.errors import CommandError
from oda_installer.lib.command import CmdResult
from oda_installer.lib.distro import DistroFamily
from oda_installer.lib.pkg import resolve_package_manager
from oda_installer.lib.probe import SystemProfile
from oda_installer.logging_utils import reset_logging

LSPCI_NVIDIA = "01:00.0 VGA compatible controller [0300]: NVIDIA Corporation GA102 [GeForce RTX 3090] [10de:2204] (rev a1)\n"
LSPCI_INTEL = "00:02.0 VGA compatible controller [0300]: Intel Corporation UHD Graphics 620 [8086:5917] (rev 07)\n"
NVCC_VERSION = (
    "nvcc: NVIDIA (R) Cuda compiler driver\n"
    "Copyright (c) 2005-2023 NVIDIA Corporation\n"
    "Cuda compilation tools, release 12.2, V12.2.140\n"
)

GPU_MARKERS = ("nvidia", "cuda", "tensorrt", "tritonserver", "nsight", "-gpu", "cu118", "torch2trt", "NCNN_VULKAN")


class FakeRunner:
    """Records every command instead of executing it.

    `responses` maps a command prefix (space-joined argv) to (returncode, stdout).
    The first matching prefix wins; unmatched commands succeed with no output.
    """

    def __init__(
        self,
        *,
        responses: Optional[Dict[str, Tuple[int, str]]] = None,
        which: Optional[Dict[str, Optional[str]]] = None,
        dry_run: bool = False,
    ) -> None:
        self.responses = dict(responses or {})
        self.which_map = dict(which or {})
        self.dry_run = dry_run
        self.calls: List[List[str]] = []
        self.queries: List[List[str]] = []
        self.cwds: List[Optional[str]] = []
        self.inputs: List[Optional[str]] = []

    def _respond(self, argv: Sequence[str]) -> Tuple[int, str]:
        joined = " ".join(argv)
        for prefix, response in self.responses.items():
            if joined.startswith(prefix):
                return response
        return 0, ""

    def run(self, argv, *, check=True, ok_codes=(0,), env=None, cwd=None, input_text=None) -> CmdResult:
        argv = [str(a) for a in argv]
        self.calls.append(argv)
        self.cwds.append(cwd)
        self.inputs.append(input_text)
        rc, out = self._respond(argv)
        if check and rc not in ok_codes:
            raise CommandError(argv, rc, "simulated failure")
        return CmdResult(argv=argv, returncode=rc, stdout=out, stderr="")

    def query(self, argv) -> CmdResult:
        argv = [str(a) for a in argv]
        self.queries.append(argv)
        rc, out = self._respond(argv)
        return CmdResult(argv=argv, returncode=rc, stdout=out, stderr="")

    def shell(self, script, *, check=True, cwd=None) -> CmdResult:
        return self.run(["sh", "-c", script], check=check, cwd=cwd)

    def which(self, name):
        if name in self.which_map:
            return self.which_map[name]
        return f"/usr/bin/{name}"

    # helpers for assertions

    def joined(self) -> List[str]:
        return [" ".join(c) for c in self.calls]

    def ran(self, fragment: str) -> bool:
        return any(fragment in c for c in self.joined())

    def gpu_calls(self) -> List[str]:
        return [c for c in self.joined() if any(m in c for m in GPU_MARKERS)]


def gpu_host_responses() -> Dict[str, Tuple[int, str]]:
    return {
        "lspci": (0, LSPCI_NVIDIA),
        "nvidia-smi": (0, "535.104.05\n"),
        "nvcc --version": (0, NVCC_VERSION),
        "python3 --version": (0, "Python 3.10.12\n"),
        "docker --version": (0, "Docker version 24.0.7, build afdd53b\n"),
    }


def cpu_host_responses() -> Dict[str, Tuple[int, str]]:
    return {
        "lspci": (0, LSPCI_INTEL),
        "nvidia-smi": (127, ""),
        "python3 --version": (0, "Python 3.10.12\n"),
        "docker --version": (0, "Docker version 24.0.7, build afdd53b\n"),
    }


def make_profile(**overrides) -> SystemProfile:
    values = dict(
        distro_family=DistroFamily.UBUNTU,
        distro_id="ubuntu",
        distro_version="22.04",
        has_gpu=False,
        gpu_driver_version=None,
        free_disk_gb=50,
        is_root=False,
        arch="x86_64",
        cpus=8,
    )
    values.update(overrides)
    return SystemProfile(**values)


@pytest.fixture
def cfg(tmp_path: Path) -> InstallerConfig:
    home = tmp_path / "home"
    home.mkdir()
    (tmp_path / "tmp").mkdir()
    return InstallerConfig(
        paths=Paths(
            home=str(home),
            log_file=str(tmp_path / "tmp" / "oda-install.log"),
            temp_prefix=str(tmp_path / "tmp" / "oda-"),
        )
    )


@pytest.fixture
def make_ctx(cfg: InstallerConfig):
    def _make(profile: Optional[SystemProfile] = None, runner: Optional[FakeRunner] = None) -> InstallCtx:
        profile = profile or make_profile()
        runner = runner or FakeRunner()
        return InstallCtx(
            profile=profile,
            pkg=resolve_package_manager(profile.distro_family),
            cfg=cfg,
            runner=runner,
            dry_run=runner.dry_run,
        )

    return _make


@pytest.fixture
def os_release(tmp_path: Path):
    def _write(distro_id: str, version: str) -> str:
        p = tmp_path / "os-release"
        p.write_text(f'NAME="Test Linux"\nID={distro_id}\nVERSION_ID="{version}"\n', encoding="utf-8")
        return str(p)

    return _write


@pytest.fixture(autouse=True)
def _isolated_logging():
    yield
    reset_logging()
