from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

_GIB = 1024 ** 3


def free_disk_gb(path: str) -> int:
    """Free space (whole GiB, rounded down) on the filesystem holding `path`."""

    p = Path(path)
    # The target may not exist yet (fresh home layout); measure its nearest parent.
    while not p.exists() and p != p.parent:
        p = p.parent
    usage = shutil.disk_usage(str(p))
    return int(usage.free // _GIB)
