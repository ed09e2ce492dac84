"""Application logging setup."""

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path
from typing import Any

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")
_MAX_OUTPUT_LEN = 200

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def preview(value: Any) -> str:
    """Strip ANSI escapes and truncate user text before it reaches a log line."""
    cleaned = _ANSI_RE.sub("", str(value)).replace("\n", " ")
    if len(cleaned) > _MAX_OUTPUT_LEN:
        cleaned = cleaned[:_MAX_OUTPUT_LEN] + f"... ({len(cleaned)} chars)"
    return cleaned


def setup_logging(
    log_level: str = "INFO",
    app_log_path: Path | None = None,
    console: bool = True,
) -> None:
    """Configure application logging.

    The interactive board passes ``console=False`` so log lines go to the
    file only and never tear the full-screen display.
    """
    handlers: list[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))

    if app_log_path:
        app_log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(app_log_path)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    # httpx logs every request at INFO; the poller would flood the log
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
