from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from ..errors import UnsupportedPlatformError

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = "/etc/os-release"


class DistroFamily(str, Enum):
    UBUNTU = "ubuntu"
    REDHAT = "redhat"


_FAMILY_BY_ID = {
    "ubuntu": DistroFamily.UBUNTU,
    "rhel": DistroFamily.REDHAT,
    "centos": DistroFamily.REDHAT,
    "rocky": DistroFamily.REDHAT,
    "almalinux": DistroFamily.REDHAT,
}


@dataclass(frozen=True)
class DistroInfo:
    family: DistroFamily
    distro_id: str
    version: str

    @property
    def major(self) -> int:
        return version_major(self.version)


def parse_os_release(text: str) -> Dict[str, str]:
    """Parse os-release KEY=value lines (values may be shell-quoted)."""

    out: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw = line.partition("=")
        try:
            parts = shlex.split(raw)
        except ValueError:
            parts = [raw.strip("\"'")]
        out[key.strip()] = parts[0] if parts else ""
    return out


def version_major(version: str) -> int:
    head = version.split(".", 1)[0].strip()
    try:
        return int(head)
    except ValueError:
        raise UnsupportedPlatformError(f"Unparseable distribution version: {version!r}") from None


def detect_distribution(
    os_release_path: str = OS_RELEASE_PATH,
    *,
    min_ubuntu_major: int = 20,
    min_redhat_major: int = 8,
) -> DistroInfo:
    """Classify the running distribution or raise UnsupportedPlatformError."""

    p = Path(os_release_path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError:
        raise UnsupportedPlatformError("Could not detect Linux distribution") from None

    fields = parse_os_release(text)
    distro_id = fields.get("ID", "").lower()
    version = fields.get("VERSION_ID", "")

    family: Optional[DistroFamily] = _FAMILY_BY_ID.get(distro_id)
    if family is None:
        raise UnsupportedPlatformError(
            f"Unsupported Linux distribution: {distro_id or 'unknown'}. "
            "Currently supporting Ubuntu and Red Hat compatible distributions"
        )

    info = DistroInfo(family=family, distro_id=distro_id, version=version)
    if family is DistroFamily.UBUNTU:
        logger.info("Detected Ubuntu distribution")
        if info.major < min_ubuntu_major:
            raise UnsupportedPlatformError(
                f"Ubuntu version must be {min_ubuntu_major}.04 or newer (found {version})"
            )
    else:
        logger.info("Detected Red Hat compatible distribution: %s", distro_id)
        if info.major < min_redhat_major:
            raise UnsupportedPlatformError(
                f"Red Hat compatible distribution version must be {min_redhat_major} or newer (found {version})"
            )
    return info
