from __future__ import annotations

import logging

from .command import CommandRunner

logger = logging.getLogger(__name__)


def is_online(runner: CommandRunner, host: str = "google.com") -> bool:
    """Single ping to a well-known host."""

    r = runner.query(["ping", "-c", "1", "-W", "5", host])
    if r.returncode != 0:
        logger.debug("ping %s failed (%s)", host, r.returncode)
    return r.returncode == 0
