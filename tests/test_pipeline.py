from __future__ import annotations

from typing import Any, Dict, List

from conftest import FakeRunner, make_profile
from oda_installer.errors import CommandError
from oda_installer.pipeline import run_pipeline
from oda_installer.state_store import ensure_defaults, mark_step_completed


class RecordingStep:
    def __init__(self, step_id: str, log: List[str], *, requires_gpu: bool = False, fail: bool = False) -> None:
        self.step_id = step_id
        self.title = f"Running {step_id}"
        self.requires_gpu = requires_gpu
        self.fail = fail
        self.log = log

    def run(self, ctx, state: Dict[str, Any]) -> Dict[str, Any]:
        self.log.append(self.step_id)
        if self.fail:
            raise CommandError(["false"], 1, "nope")
        return state


def test_runs_all_steps_in_order(make_ctx):
    log: List[str] = []
    steps = [RecordingStep(s, log) for s in ("a", "b", "c")]
    result = run_pipeline(ctx=make_ctx(), state=ensure_defaults({}), steps=steps)

    assert result.ok
    assert result.exit_code == 0
    assert log == ["a", "b", "c"]
    assert result.ran_steps == ["a", "b", "c"]
    assert result.state["execution"]["completed_steps"] == ["a", "b", "c"]
    assert result.state["execution"]["current_step"] is None


def test_stops_at_first_failure(make_ctx):
    log: List[str] = []
    steps = [RecordingStep("a", log), RecordingStep("b", log, fail=True), RecordingStep("c", log)]
    result = run_pipeline(ctx=make_ctx(), state=ensure_defaults({}), steps=steps)

    assert not result.ok
    assert result.exit_code == 1
    assert log == ["a", "b"]
    assert result.failed.step_id == "b"
    assert isinstance(result.failed.cause, CommandError)
    errors = result.state["execution"]["errors"]
    assert errors == [{"step": "b", "error": str(CommandError(["false"], 1, "nope")), "argv": ["false"], "returncode": 1}]
    assert result.state["execution"]["completed_steps"] == ["a"]
    assert result.state["execution"]["current_step"] == "b"


def test_unexpected_exceptions_are_step_failures_too(make_ctx):
    class Boom(RecordingStep):
        def run(self, ctx, state):
            raise ValueError("bad value")

    log: List[str] = []
    result = run_pipeline(ctx=make_ctx(), state=ensure_defaults({}), steps=[Boom("x", log), RecordingStep("y", log)])
    assert result.failed.step_id == "x"
    assert log == []


def test_gpu_steps_skipped_without_gpu(make_ctx):
    log: List[str] = []
    steps = [RecordingStep("a", log), RecordingStep("gpu", log, requires_gpu=True), RecordingStep("c", log)]
    result = run_pipeline(ctx=make_ctx(make_profile(has_gpu=False)), state=ensure_defaults({}), steps=steps)

    assert log == ["a", "c"]
    assert result.skipped_steps == ["gpu"]


def test_gpu_steps_run_with_gpu(make_ctx):
    log: List[str] = []
    steps = [RecordingStep("gpu", log, requires_gpu=True)]
    run_pipeline(ctx=make_ctx(make_profile(has_gpu=True)), state=ensure_defaults({}), steps=steps)
    assert log == ["gpu"]


def test_resume_skips_completed_steps(make_ctx):
    log: List[str] = []
    state = ensure_defaults({})
    mark_step_completed(state, "a")
    steps = [RecordingStep("a", log), RecordingStep("b", log)]

    result = run_pipeline(ctx=make_ctx(), state=state, steps=steps, resume=True)
    assert log == ["b"]
    assert result.skipped_steps == ["a"]


def test_without_resume_completed_steps_run_again(make_ctx):
    log: List[str] = []
    state = ensure_defaults({})
    mark_step_completed(state, "a")
    run_pipeline(ctx=make_ctx(), state=state, steps=[RecordingStep("a", log)])
    assert log == ["a"]
