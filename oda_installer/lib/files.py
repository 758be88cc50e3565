from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def append_line_once(path: str, line: str, *, dry_run: bool = False) -> bool:
    """Append `line` to a text file unless an identical line is already present.

    Returns True when the file was (or, in dry-run, would be) changed.
    """

    p = Path(path)
    # Profiles are not always UTF-8; undecodable bytes must not fail the step.
    text = p.read_text(encoding="utf-8", errors="surrogateescape") if p.exists() else ""
    if line in text.splitlines():
        logger.info("Already present in %s: %s", p, line)
        return False
    if dry_run:
        logger.info("Would append to %s: %s", p, line)
        return True
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("a", encoding="utf-8") as f:
        if text and not text.endswith("\n"):
            f.write("\n")
        f.write(line + "\n")
    logger.info("Appended to %s: %s", p, line)
    return True


def remove_paths(paths: list[Path], *, dry_run: bool = False) -> list[str]:
    removed: list[str] = []
    for p in paths:
        if dry_run:
            logger.info("Would remove %s", p)
        else:
            p.unlink(missing_ok=True)
        removed.append(str(p))
    return removed
