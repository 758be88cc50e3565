from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import InstallCtx
from ..lib.distro import DistroFamily

logger = logging.getLogger(__name__)

COMMON_PACKAGES = ["curl", "wget", "git", "zsh", "cmake"]

TOOLCHAIN_BY_FAMILY = {
    DistroFamily.UBUNTU: ["build-essential"],
    DistroFamily.REDHAT: ["gcc", "gcc-c++", "make"],
}


def base_packages(family: DistroFamily) -> list[str]:
    return [*COMMON_PACKAGES, *TOOLCHAIN_BY_FAMILY[family]]


class BasePackagesStep:
    step_id = "10_base_packages"
    title = "Installing base packages"
    requires_gpu = False

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ctx.pkg.update(ctx.runner)

        # One package per command so the log names the package that broke.
        packages = base_packages(ctx.profile.distro_family)
        for package in packages:
            logger.info("Installing %s...", package)
            ctx.pkg.install(ctx.runner, [package])

        state.setdefault("execution", {}).setdefault("decisions", {})["base_packages"] = packages
        return state
