from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..context import InstallCtx
from ..lib.files import append_line_once
from ..lib.source_build import git_clone, make_build

logger = logging.getLogger(__name__)

MS_KEY_TMP = "/tmp/oda-packages.microsoft.gpg"
MS_KEYRING = "/etc/apt/trusted.gpg.d/packages.microsoft.gpg"
VSCODE_APT_LIST = "/etc/apt/sources.list.d/vscode.list"
VSCODE_YUM_REPO = "/etc/yum.repos.d/vscode.repo"


def vscode_yum_repo(ctx: InstallCtx) -> str:
    urls = ctx.cfg.urls
    return "\n".join(
        [
            "[code]",
            "name=Visual Studio Code",
            f"baseurl={urls.vscode_rpm_repo}",
            "enabled=1",
            "gpgcheck=1",
            f"gpgkey={urls.microsoft_key}",
            "",
        ]
    )


def llama_cpp_path_line(ctx: InstallCtx) -> str:
    return f'export PATH="$PATH:{Path(ctx.paths.install_dir) / "llama.cpp"}"'


class DevToolsStep:
    """VS Code, Oh My Zsh, and llama.cpp built from source."""

    step_id = "60_dev_tools"
    title = "Setting up development tools"
    requires_gpu = False

    def _install_vscode(self, ctx: InstallCtx) -> None:
        urls = ctx.cfg.urls
        r = ctx.runner
        if ctx.is_ubuntu:
            r.shell(f"wget -qO- {urls.microsoft_key} | gpg --dearmor > {MS_KEY_TMP}")
            r.run(["sudo", "install", "-o", "root", "-g", "root", "-m", "644", MS_KEY_TMP, MS_KEYRING])
            source = (
                f"deb [arch=amd64,arm64,armhf signed-by={MS_KEYRING}] "
                f"{urls.vscode_deb_repo} stable main\n"
            )
            r.run(["sudo", "tee", VSCODE_APT_LIST], input_text=source)
            r.run(["rm", "-f", MS_KEY_TMP])
            ctx.pkg.update(r)
        else:
            r.run(["sudo", "rpm", "--import", urls.microsoft_key])
            r.run(["sudo", "tee", VSCODE_YUM_REPO], input_text=vscode_yum_repo(ctx))
        ctx.pkg.install(r, ["code"])

    def _install_ohmyzsh(self, ctx: InstallCtx) -> None:
        ctx.runner.shell(f'sh -c "$(curl -fsSL {ctx.cfg.urls.ohmyzsh_installer})" "" --unattended')

    def _build_llama_cpp(self, ctx: InstallCtx) -> str:
        dest = str(Path(ctx.paths.install_dir) / "llama.cpp")
        if not ctx.dry_run:
            Path(ctx.paths.install_dir).mkdir(parents=True, exist_ok=True)
        git_clone(ctx.runner, ctx.cfg.urls.llama_cpp_repo, dest)
        make_build(ctx.runner, dest, jobs=ctx.profile.cpus, variables=["CUDA=1"] if ctx.has_gpu else [])
        return dest

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        self._install_vscode(ctx)
        self._install_ohmyzsh(ctx)
        llama_dir = self._build_llama_cpp(ctx)

        line = llama_cpp_path_line(ctx)
        for profile in ctx.paths.shell_profiles:
            append_line_once(profile, line, dry_run=ctx.dry_run)

        state.setdefault("execution", {}).setdefault("decisions", {})["llama_cpp"] = llama_dir
        return state
