from __future__ import annotations

from typing import Sequence


class InstallerError(RuntimeError):
    """Base class for every failure the installer reports."""


class PreconditionError(InstallerError):
    """Host is not fit for installation. Raised before any mutation."""


class UnsupportedPlatformError(PreconditionError):
    pass


class InsufficientDiskError(PreconditionError):
    pass


class NetworkUnavailableError(PreconditionError):
    pass


class PrivilegeError(PreconditionError):
    pass


class CommandError(InstallerError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if stderr.strip():
            msg += f"\n{stderr.strip()}"
        super().__init__(msg)


class StepFailedError(InstallerError):
    def __init__(self, step_id: str, cause: BaseException) -> None:
        self.step_id = step_id
        self.cause = cause
        super().__init__(f"Step {step_id} failed: {cause}")
