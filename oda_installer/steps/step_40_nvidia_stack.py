from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..context import InstallCtx

logger = logging.getLogger(__name__)

NVIDIA_KEYRING = "/usr/share/keyrings/nvidia-container-toolkit-keyring.gpg"
NVIDIA_APT_LIST = "/etc/apt/sources.list.d/nvidia-container-toolkit.list"
NVIDIA_YUM_REPO = "/etc/yum.repos.d/nvidia-container-toolkit.repo"


def triton_images(ctx: InstallCtx) -> List[str]:
    base = f"{ctx.cfg.urls.triton_image}:{ctx.versions.triton}"
    return [f"{base}-py3", f"{base}-py3-sdk"]


def pull_images(ctx: InstallCtx, images: List[str]) -> None:
    for image in images:
        ctx.runner.run(["sudo", "docker", "pull", image])


class NvidiaStackStep:
    """Driver, CUDA, TensorRT, container toolkit, Triton images, Nsight."""

    step_id = "40_nvidia_stack"
    title = "Installing NVIDIA components"
    requires_gpu = True

    def _add_repositories(self, ctx: InstallCtx) -> None:
        urls = ctx.cfg.urls
        if ctx.is_ubuntu:
            ctx.runner.shell(f"curl -fsSL {urls.nvidia_container_gpgkey} | sudo gpg --dearmor --yes -o {NVIDIA_KEYRING}")
            ctx.runner.shell(
                f"curl -s -L {urls.nvidia_container_deb_list} | "
                f"sed 's#deb https://#deb [signed-by={NVIDIA_KEYRING}] https://#g' | "
                f"sudo tee {NVIDIA_APT_LIST}"
            )
            ctx.pkg.update(ctx.runner)
        else:
            cuda_repo = urls.cuda_rhel_repo.format(major=ctx.profile.distro_major)
            ctx.runner.run(["sudo", "dnf", "config-manager", "--add-repo", cuda_repo])
            ctx.runner.shell(f"curl -s -L {urls.nvidia_container_rpm_repo} | sudo tee {NVIDIA_YUM_REPO}")

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        v = ctx.versions
        decisions = state.setdefault("execution", {}).setdefault("decisions", {})

        self._add_repositories(ctx)

        ctx.pkg.install(ctx.runner, [f"nvidia-driver-{v.nvidia_driver}", "cuda-toolkit"])
        ctx.pkg.install(ctx.runner, [ctx.pkg.pinned("tensorrt", v.tensorrt)])
        ctx.pkg.install(ctx.runner, ["nvidia-container-toolkit"])

        images = triton_images(ctx)
        if ctx.runner.which("docker") or ctx.dry_run:
            pull_images(ctx, images)
            decisions["triton_images_deferred"] = []
        else:
            # Docker arrives in the container-runtime step, which pulls these afterwards.
            logger.warning("Docker not installed yet; deferring Triton image pull")
            decisions["triton_images_deferred"] = images

        ctx.pkg.install(ctx.runner, ["nsight-systems"])

        decisions["nvidia_driver"] = v.nvidia_driver
        decisions["tensorrt"] = v.tensorrt
        return state
