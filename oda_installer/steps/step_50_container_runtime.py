from __future__ import annotations

import getpass
import logging
from typing import Any, Dict

from ..context import InstallCtx
from .step_40_nvidia_stack import pull_images

logger = logging.getLogger(__name__)

DOCKER_SCRIPT_PATH = "/tmp/oda-get-docker.sh"
NVIDIA_DOCKER_APT_LIST = "/etc/apt/sources.list.d/nvidia-docker.list"
NVIDIA_DOCKER_YUM_REPO = "/etc/yum.repos.d/nvidia-docker.repo"


class ContainerRuntimeStep:
    step_id = "50_container_runtime"
    title = "Setting up Docker"
    requires_gpu = False

    def _install_engine(self, ctx: InstallCtx) -> None:
        urls = ctx.cfg.urls
        if ctx.is_ubuntu:
            ctx.runner.run(["curl", "-fsSL", urls.docker_convenience_script, "-o", DOCKER_SCRIPT_PATH])
            ctx.runner.run(["sudo", "sh", DOCKER_SCRIPT_PATH])
            ctx.runner.run(["rm", "-f", DOCKER_SCRIPT_PATH])
        else:
            ctx.runner.run(["sudo", "dnf", "config-manager", f"--add-repo={urls.docker_ce_rpm_repo}"])
            ctx.pkg.install(ctx.runner, ["docker-ce", "docker-ce-cli", "containerd.io"])
            ctx.runner.run(["sudo", "systemctl", "start", "docker"])
            ctx.runner.run(["sudo", "systemctl", "enable", "docker"])

    def _install_gpu_runtime(self, ctx: InstallCtx) -> None:
        base = ctx.cfg.urls.nvidia_docker_base
        distribution = f"{ctx.profile.distro_id}{ctx.profile.distro_version}"
        if ctx.is_ubuntu:
            ctx.runner.shell(f"curl -s -L {base}/gpgkey | sudo apt-key add -")
            ctx.runner.shell(f"curl -s -L {base}/{distribution}/nvidia-docker.list | sudo tee {NVIDIA_DOCKER_APT_LIST}")
            ctx.pkg.update(ctx.runner)
        else:
            ctx.runner.shell(f"curl -s -L {base}/{distribution}/nvidia-docker.repo | sudo tee {NVIDIA_DOCKER_YUM_REPO}")
            ctx.pkg.clean(ctx.runner)
        ctx.pkg.install(ctx.runner, ["nvidia-docker2"])
        ctx.runner.run(["sudo", "systemctl", "restart", "docker"])

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        decisions = state.setdefault("execution", {}).setdefault("decisions", {})

        self._install_engine(ctx)

        user = getpass.getuser()
        ctx.runner.run(["sudo", "usermod", "-aG", "docker", user])
        logger.info("Added %s to the docker group (takes effect on next login)", user)

        if ctx.has_gpu:
            self._install_gpu_runtime(ctx)
            deferred = list(decisions.get("triton_images_deferred") or [])
            if deferred:
                pull_images(ctx, deferred)
                decisions["triton_images_deferred"] = []

        decisions["docker_gpu_runtime"] = ctx.has_gpu
        return state
