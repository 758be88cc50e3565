from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import InstallCtx

logger = logging.getLogger(__name__)

DEADSNAKES_PPA = "ppa:deadsnakes/ppa"


class InstallPythonStep:
    step_id = "20_install_python"
    title = "Installing Python"
    requires_gpu = False

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        py = ctx.python_bin
        logger.info("Installing Python %s...", ctx.versions.python)

        if ctx.is_ubuntu:
            # add-apt-repository ships in software-properties-common.
            ctx.pkg.install(ctx.runner, ["software-properties-common"])
            ctx.runner.run(["sudo", "add-apt-repository", "-y", DEADSNAKES_PPA])
            ctx.pkg.update(ctx.runner)
            ctx.pkg.install(ctx.runner, [py, f"{py}-venv", f"{py}-dev"])
        else:
            ctx.pkg.install(ctx.runner, ["epel-release"])
            ctx.pkg.install(ctx.runner, [py, f"{py}-devel"])

        state.setdefault("execution", {}).setdefault("decisions", {})["python"] = py
        return state
