from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional, TextIO

DEFAULT_LOG_PATH = "/tmp/oda-install.log"

_RED = "\033[0;31m"
_GREEN = "\033[0;32m"
_YELLOW = "\033[1;33m"
_RESET = "\033[0m"


class ConsoleFormatter(logging.Formatter):
    """One tagged line per record: [ODA], [WARNING] or [ERROR]."""

    _TAGS = {
        logging.DEBUG: ("[DEBUG]", ""),
        logging.INFO: ("[ODA]", _GREEN),
        logging.WARNING: ("[WARNING]", _YELLOW),
        logging.ERROR: ("[ERROR]", _RED),
        logging.CRITICAL: ("[ERROR]", _RED),
    }

    def __init__(self, *, color: bool) -> None:
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        tag, color = self._TAGS.get(record.levelno, (f"[{record.levelname}]", ""))
        if self.color and color:
            tag = f"{color}{tag}{_RESET}"
        msg = record.getMessage()
        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"
        return f"{tag} {msg}"


def use_color(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
    stream: Optional[TextIO] = None,
) -> str:
    """Configure logging.

    All decisions and commands are recorded to the log file in plain text,
    and mirrored to the console with a colored severity tag.

    Notes:
    - If the requested path cannot be opened we fall back to a file in the
      current working directory and keep going.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_oda_configured", False):
        return getattr(logger, "_oda_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler: logging.Handler = logging.FileHandler(log_path)
    except OSError:
        fallback = str(Path.cwd() / "oda-install.log")
        file_handler = logging.FileHandler(fallback)
        chosen_path = fallback
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        out = stream or sys.stderr
        console = logging.StreamHandler(out)
        console.setFormatter(ConsoleFormatter(color=use_color(out)))
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_oda_configured", True)
    setattr(logger, "_oda_handlers", handlers)
    setattr(logger, "_oda_log_path", chosen_path)

    logging.getLogger(__name__).debug(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path


def reset_logging() -> None:
    """Drop handlers installed by configure_logging()."""

    logger = logging.getLogger()
    if not getattr(logger, "_oda_configured", False):
        return
    for h in getattr(logger, "_oda_handlers", []):
        logger.removeHandler(h)
        h.close()
    for attr in ("_oda_configured", "_oda_log_path", "_oda_handlers"):
        if hasattr(logger, attr):
            delattr(logger, attr)
