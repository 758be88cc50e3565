from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

from ..context import InstallCtx

logger = logging.getLogger(__name__)


def framework_requirements(ctx: InstallCtx) -> List[Tuple[List[str], str]]:
    """(requirements, index_url) pairs for the deep-learning frameworks.

    An empty index_url means the default package index.
    """

    v = ctx.versions
    urls = ctx.cfg.urls
    if ctx.has_gpu:
        return [
            ([f"torch=={v.pytorch}"], urls.torch_cuda_index),
            ([f"tensorflow=={v.tensorflow}"], ""),
        ]
    return [
        ([f"torch=={v.pytorch}"], urls.torch_cpu_index),
        ([f"tensorflow-cpu=={v.tensorflow}"], ""),
    ]


def data_requirements(ctx: InstallCtx) -> List[str]:
    v = ctx.versions
    return [
        f"numpy=={v.numpy}",
        f"pandas=={v.pandas}",
        f"scikit-learn=={v.scikit_learn}",
    ]


class PythonEnvStep:
    step_id = "30_python_env"
    title = "Setting up Python virtual environment"
    requires_gpu = False

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        venv = ctx.venv
        venv.create(ctx.runner, ctx.python_bin)
        venv.pip_install(ctx.runner, ["pip"], upgrade=True)

        for reqs, index_url in framework_requirements(ctx):
            venv.pip_install(ctx.runner, reqs, index_url=index_url or None)

        venv.pip_install(ctx.runner, data_requirements(ctx))

        state.setdefault("execution", {}).setdefault("decisions", {})["venv"] = venv.path
        logger.info("Virtual environment ready at %s (gpu build=%s)", venv.path, ctx.has_gpu)
        return state
