from __future__ import annotations

import glob
import logging
import os
from pathlib import Path
from typing import Any, Dict, List

from ..context import InstallCtx
from ..lib.files import remove_paths

logger = logging.getLogger(__name__)

HOME_ARTIFACT_PATTERNS = ["cuda*.run", "vscode*.deb", "vscode*.rpm"]


def temp_files(prefix: str, *, keep: List[str]) -> List[str]:
    kept = {os.path.realpath(k) for k in keep}
    return sorted(p for p in glob.glob(f"{prefix}*") if os.path.realpath(p) not in kept)


def home_artifacts(home: str) -> List[Path]:
    root = Path(home)
    found: List[Path] = []
    for pattern in HOME_ARTIFACT_PATTERNS:
        found.extend(sorted(root.glob(pattern)))
    return found


class CleanupStep:
    """Remove temp files, package caches and leftover installers."""

    step_id = "90_cleanup"
    title = "Cleaning up temporary files"
    requires_gpu = False

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        # The active log also matches the temp prefix and must survive.
        keep = [ctx.paths.log_file]
        log_path = getattr(logging.getLogger(), "_oda_log_path", None)
        if log_path:
            keep.append(log_path)

        stale = temp_files(ctx.paths.temp_prefix, keep=keep)
        if stale:
            ctx.runner.run(["sudo", "rm", "-rf", *stale])

        ctx.pkg.clean(ctx.runner)

        removed = remove_paths(home_artifacts(ctx.paths.home), dry_run=ctx.dry_run)

        state.setdefault("execution", {}).setdefault("decisions", {})["cleanup"] = {
            "temp": stale,
            "home": removed,
        }
        logger.info("Cleanup completed successfully")
        return state
