from __future__ import annotations

import logging
import threading
from typing import Optional

from .command import CommandRunner

logger = logging.getLogger(__name__)


class SudoKeepAlive:
    """Refresh the cached sudo credential in the background.

    The thread is bound to the installer run: `stop()` (or leaving the
    `with` block) ends it immediately instead of waiting for the next tick.
    """

    def __init__(self, runner: CommandRunner, *, interval_s: float = 60.0) -> None:
        self.runner = runner
        self.interval_s = interval_s
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.refreshes = 0

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_s):
            r = self.runner.query(["sudo", "-n", "true"])
            self.refreshes += 1
            if r.returncode != 0:
                logger.warning("sudo credential refresh failed (%s)", r.returncode)

    def start(self) -> "SudoKeepAlive":
        if self._thread is not None:
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="sudo-keepalive", daemon=True)
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self) -> "SudoKeepAlive":
        return self.start()

    def __exit__(self, *exc: object) -> None:
        self.stop()
