from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .context import InstallCtx
from .errors import CommandError, StepFailedError
from .state_store import is_step_completed, mark_step_completed

logger = logging.getLogger(__name__)


class Step(Protocol):
    """One ordered unit of the installation recipe."""

    step_id: str
    title: str
    requires_gpu: bool

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]
    skipped_steps: List[str]
    failed: Optional[StepFailedError] = None

    @property
    def ok(self) -> bool:
        return self.failed is None

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


def run_pipeline(
    *,
    ctx: InstallCtx,
    state: Dict[str, Any],
    steps: Sequence[Step],
    resume: bool = False,
) -> PipelineResult:
    """Run steps in order; stop at the first failure.

    Nothing is rolled back: whatever earlier steps installed stays installed.
    """

    ran: List[str] = []
    skipped: List[str] = []

    for step in steps:
        state.setdefault("execution", {})["current_step"] = step.step_id

        if step.requires_gpu and not ctx.has_gpu:
            logger.info("Skipping step %s (no NVIDIA GPU)", step.step_id)
            skipped.append(step.step_id)
            continue

        if resume and is_step_completed(state, step.step_id):
            logger.info("Skipping step %s (completed by a previous run)", step.step_id)
            skipped.append(step.step_id)
            continue

        logger.info("%s...", step.title)
        try:
            state = step.run(ctx, state)
        except Exception as e:
            failure = StepFailedError(step.step_id, e)
            logger.error("Step %s failed: %s", step.step_id, e)
            if not isinstance(e, CommandError):
                logger.debug("Step %s traceback", step.step_id, exc_info=True)
            state.setdefault("execution", {}).setdefault("errors", []).append(
                {
                    "step": step.step_id,
                    "error": str(e),
                    "argv": getattr(e, "argv", None),
                    "returncode": getattr(e, "returncode", None),
                }
            )
            return PipelineResult(state=state, ran_steps=ran, skipped_steps=skipped, failed=failure)

        mark_step_completed(state, step.step_id)
        ran.append(step.step_id)

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran, skipped_steps=skipped)
