from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

STATE_VERSION = 1


def _is_yaml(path: Path) -> bool:
    # Anything that is not .yaml/.yml is written as JSON.
    return path.suffix.lower() in {".yaml", ".yml"}


def _yaml():
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("YAML run record requested but PyYAML is not installed; use a .json path") from e
    return yaml


def load_state(path: str) -> Dict[str, Any]:
    """Previous run record at `path`, or {} on a first run."""

    p = Path(path)
    if not p.exists():
        return {}

    text = p.read_text(encoding="utf-8")
    if _is_yaml(p):
        yaml = _yaml()
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Run record {p} is not valid YAML: {e}") from e
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Run record {p} must hold a mapping, got {type(data).__name__}")
    logger.debug("Loaded run record from %s", p)
    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    if _is_yaml(p):
        body = _yaml().safe_dump(state, sort_keys=False)
    else:
        body = json.dumps(state, indent=2, sort_keys=True)
    # Written beside the record, then renamed over it.
    tmp = p.with_name(f".{p.name}.tmp")
    tmp.write_text(body + "\n", encoding="utf-8")
    os.replace(tmp, p)
    logger.debug("Saved run record to %s", p)


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill missing keys; recorded values are kept."""

    state.setdefault("version", STATE_VERSION)
    state.setdefault("system", {})
    exe = state.setdefault("execution", {})
    for key, default in (("current_step", None), ("completed_steps", []), ("errors", []), ("decisions", {})):
        exe.setdefault(key, default)
    return state


def start_run(state: Dict[str, Any], *, resume: bool) -> Dict[str, Any]:
    """Reset per-run bookkeeping. Completed steps survive only when resuming."""

    exe = ensure_defaults(state)["execution"]
    if not resume:
        exe["completed_steps"] = []
        exe["decisions"] = {}
    exe["errors"] = []
    exe["current_step"] = None
    return state


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    completed = state.setdefault("execution", {}).setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def is_step_completed(state: Dict[str, Any], step_id: str) -> bool:
    return step_id in ((state.get("execution") or {}).get("completed_steps") or [])
