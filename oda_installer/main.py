from __future__ import annotations

import argparse
import dataclasses
import logging
from typing import Any, Dict, Optional

from .config import InstallerConfig, load_config
from .context import InstallCtx
from .errors import PreconditionError
from .lib.command import CommandRunner
from .lib.pkg import resolve_package_manager
from .lib.probe import check_requirements, probe_system
from .lib.sudo import SudoKeepAlive
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import run_pipeline
from .report import Reporter, report_success
from .state_store import load_state, save_state, start_run
from .steps import (
    AIToolsStep,
    BasePackagesStep,
    CleanupStep,
    ContainerRuntimeStep,
    DevToolsStep,
    InstallPythonStep,
    NvidiaStackStep,
    PythonEnvStep,
)

logger = logging.getLogger(__name__)


def build_steps():
    # Cleanup is last, so it only runs when every installation step succeeded.
    return [
        BasePackagesStep(),
        InstallPythonStep(),
        PythonEnvStep(),
        NvidiaStackStep(),
        ContainerRuntimeStep(),
        DevToolsStep(),
        AIToolsStep(),
        CleanupStep(),
    ]


def run(
    cfg: InstallerConfig,
    *,
    runner: CommandRunner,
    log_path: str,
    resume: bool = False,
    reporter: Optional[Reporter] = None,
    probe_options: Optional[Dict[str, Any]] = None,
) -> int:
    """Probe the host, run every installation step, report. Returns the exit code."""

    reporter = reporter or Reporter()
    reporter.banner()
    logger.info("Starting ODA installation...")

    try:
        profile = probe_system(runner, cfg, **(probe_options or {}))
        check_requirements(profile, runner, cfg)
    except PreconditionError as e:
        # Nothing has been touched yet, not even the state file.
        logger.error("%s", e)
        return 1

    ctx = InstallCtx(
        profile=profile,
        pkg=resolve_package_manager(profile.distro_family),
        cfg=cfg,
        runner=runner,
        dry_run=runner.dry_run,
    )

    state_path = cfg.paths.state_file
    try:
        previous = load_state(state_path)
    except (OSError, ValueError) as e:
        if resume:
            logger.error("Cannot resume: run record %s is unreadable: %s", state_path, e)
            return 1
        logger.warning("Ignoring unreadable run record %s: %s", state_path, e)
        previous = {}
    state = start_run(previous, resume=resume)
    state["system"] = profile.to_dict()
    state["execution"]["paths"] = {"log_path": log_path, "state_path": state_path}

    with SudoKeepAlive(runner, interval_s=cfg.requirements.keepalive_interval_s):
        try:
            result = run_pipeline(ctx=ctx, state=state, steps=build_steps(), resume=resume)
            state = result.state
            state["execution"]["summary"] = {
                "ran_steps": result.ran_steps,
                "skipped_steps": result.skipped_steps,
                "ok": result.ok,
            }
        finally:
            if not ctx.dry_run:
                save_state(state_path, state)

    if not result.ok:
        logger.error("Installation aborted: %s", result.failed)
        logger.error("See %s for details", log_path)
        return result.exit_code

    report_success(reporter, runner, profile, venv_dir=cfg.paths.venv_dir, log_path=log_path)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="oda-installer",
        description="Provision this workstation for on-device AI development.",
    )
    p.add_argument("--config", default=None, help="YAML file overriding version pins and paths")
    p.add_argument("--log", default=None, help=f"Installer log (default {DEFAULT_LOG_PATH})")
    p.add_argument("--state", default=None, help="Run record (json|yaml), default ~/.oda/state.json")
    p.add_argument("--dry-run", action="store_true", help="Log commands without executing them")
    p.add_argument("--resume", action="store_true", help="Skip steps a previous run completed")

    args = p.parse_args(argv)

    try:
        cfg = load_config(args.config)
    except (OSError, ValueError, RuntimeError) as e:
        configure_logging(log_path=args.log or DEFAULT_LOG_PATH)
        logger.error("Invalid config %s: %s", args.config, e)
        return 2

    overrides = {}
    if args.log:
        overrides["log_file"] = args.log
    if args.state:
        overrides["state_file"] = args.state
    if overrides:
        cfg = dataclasses.replace(cfg, paths=dataclasses.replace(cfg.paths, **overrides))

    actual_log_path = configure_logging(log_path=cfg.paths.log_file)

    try:
        return run(
            cfg,
            runner=CommandRunner(dry_run=bool(args.dry_run)),
            log_path=actual_log_path,
            resume=bool(args.resume),
        )
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130
