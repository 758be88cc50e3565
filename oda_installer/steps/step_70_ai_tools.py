from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

from ..context import InstallCtx
from ..lib.files import append_line_once
from ..lib.source_build import cmake_build, git_clone

logger = logging.getLogger(__name__)

INTEL_KEY_TMP = "/tmp/oda-GPG-PUB-KEY-INTEL-SW-PRODUCTS.PUB"
OPENVINO_APT_LIST = "/etc/apt/sources.list.d/intel-openvino-{release}.list"

OPTIMIZATION_PACKAGES = [
    "neural-compressor",
    "tensorflow-model-optimization",
    "mxnet",
    "tritonclient[all]",
]


def optimization_packages(has_gpu: bool) -> List[str]:
    if has_gpu:
        return [*OPTIMIZATION_PACKAGES, "paddlepaddle-gpu", "torch2trt"]
    return [*OPTIMIZATION_PACKAGES, "paddlepaddle"]


class AIToolsStep:
    """Edge/mobile inference SDKs and compilers, installed into the venv.

    Sub-installers run in a fixed order; the first failure ends the step.
    """

    step_id = "70_ai_tools"
    title = "Setting up AI development tools"
    requires_gpu = False

    def tools(self, ctx: InstallCtx) -> List[Tuple[str, Callable[[InstallCtx], None]]]:
        tools: List[Tuple[str, Callable[[InstallCtx], None]]] = [
            ("TensorFlow Lite", self._tflite),
            ("ONNX Runtime", self._onnx),
            ("PyTorch Mobile", self._torch_mobile),
            ("Apache TVM", self._tvm),
            ("Edge Impulse CLI", self._edge_impulse),
            ("MediaPipe", self._mediapipe),
            ("Neural Network Distiller", self._distiller),
            ("MLPerf loadgen", self._mlperf),
            ("Optimization toolkits", self._optimizers),
            ("OpenVINO", self._openvino),
            ("NCNN", self._ncnn),
        ]
        if ctx.profile.arch == "aarch64":
            tools.append(("Arm NN", self._armnn))
        return tools

    def _tflite(self, ctx: InstallCtx) -> None:
        ctx.venv.pip_install(ctx.runner, ["tflite-runtime"])

    def _onnx(self, ctx: InstallCtx) -> None:
        runtime = "onnxruntime-gpu" if ctx.has_gpu else "onnxruntime"
        ctx.venv.pip_install(ctx.runner, ["onnx", runtime])

    def _torch_mobile(self, ctx: InstallCtx) -> None:
        v = ctx.versions
        urls = ctx.cfg.urls
        ctx.venv.pip_install(
            ctx.runner,
            [f"torch=={v.pytorch}", f"torchvision=={v.torchvision}", f"torchaudio=={v.torchaudio}"],
            index_url=urls.torch_cuda_index if ctx.has_gpu else urls.torch_cpu_index,
        )

    def _tvm(self, ctx: InstallCtx) -> None:
        src = ctx.src_path("tvm")
        git_clone(ctx.runner, ctx.cfg.urls.tvm_repo, src, recursive=True, ref=f"v{ctx.versions.tvm}")

        build = Path(src) / "build"
        if not ctx.dry_run:
            build.mkdir(parents=True, exist_ok=True)
        ctx.runner.run(["cp", "cmake/config.cmake", "build/"], cwd=src)
        if ctx.has_gpu:
            for line in ("set(USE_CUDA ON)", "set(USE_CUDNN ON)"):
                append_line_once(str(build / "config.cmake"), line, dry_run=ctx.dry_run)

        cmake_build(ctx.runner, src, jobs=ctx.profile.cpus, dry_run=ctx.dry_run)
        ctx.venv.pip_install(ctx.runner, [], editable=str(Path(src) / "python"))

    def _edge_impulse(self, ctx: InstallCtx) -> None:
        ctx.pkg.install(ctx.runner, ["nodejs", "npm"])
        ctx.runner.run(["sudo", "npm", "install", "-g", "edge-impulse-cli"])

    def _mediapipe(self, ctx: InstallCtx) -> None:
        ctx.venv.pip_install(ctx.runner, ["mediapipe"])

    def _distiller(self, ctx: InstallCtx) -> None:
        src = ctx.src_path("distiller")
        git_clone(ctx.runner, ctx.cfg.urls.distiller_repo, src)
        ctx.venv.pip_install(ctx.runner, [], editable=src)

    def _mlperf(self, ctx: InstallCtx) -> None:
        ctx.venv.pip_install(ctx.runner, ["mlcommons-loadgen"])

    def _optimizers(self, ctx: InstallCtx) -> None:
        ctx.venv.pip_install(ctx.runner, optimization_packages(ctx.has_gpu))

    def _openvino(self, ctx: InstallCtx) -> None:
        urls = ctx.cfg.urls
        release = ctx.versions.openvino
        if ctx.is_ubuntu:
            suite = f"ubuntu{ctx.profile.distro_major}"
            ctx.runner.run(["wget", "-O", INTEL_KEY_TMP, urls.intel_gpg_key])
            ctx.runner.run(["sudo", "apt-key", "add", INTEL_KEY_TMP])
            ctx.runner.run(
                ["sudo", "tee", OPENVINO_APT_LIST.format(release=release)],
                input_text=f"deb {urls.openvino_apt.format(release=release)} {suite} main\n",
            )
            ctx.pkg.update(ctx.runner)
            ctx.pkg.install(ctx.runner, [f"intel-openvino-dev-{suite}"])
        else:
            ctx.runner.run(["sudo", "dnf", "config-manager", "--add-repo", urls.openvino_yum_repo.format(release=release)])
            ctx.pkg.install(ctx.runner, ["intel-openvino-dev"])

    def _ncnn(self, ctx: InstallCtx) -> None:
        src = ctx.src_path("ncnn")
        git_clone(ctx.runner, ctx.cfg.urls.ncnn_repo, src)
        defines = {"NCNN_VULKAN": "ON"} if ctx.has_gpu else {}
        cmake_build(ctx.runner, src, jobs=ctx.profile.cpus, defines=defines, sudo_install=True, dry_run=ctx.dry_run)

    def _armnn(self, ctx: InstallCtx) -> None:
        src = ctx.src_path("armnn")
        git_clone(ctx.runner, ctx.cfg.urls.armnn_repo, src)
        cmake_build(
            ctx.runner,
            src,
            jobs=ctx.profile.cpus,
            defines={
                "ARMCOMPUTE_ROOT": "/usr/local/include",
                "ARMCOMPUTE_BUILD_DIR": "/usr/local/lib",
            },
            sudo_install=True,
            dry_run=ctx.dry_run,
        )

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        if not ctx.dry_run:
            Path(ctx.paths.src_dir).mkdir(parents=True, exist_ok=True)

        installed: List[str] = []
        for name, install in self.tools(ctx):
            logger.info("Installing %s...", name)
            install(ctx)
            installed.append(name)

        state.setdefault("execution", {}).setdefault("decisions", {})["ai_tools"] = installed
        return state
