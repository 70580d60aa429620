"""Per-run log file setup."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

from sbchargelimit.core.config_loader import APP_NAME

LOG_LEVEL_ENV = "SBCHARGELIMIT_LOG"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def log_dir() -> Path:
    xdg_cache = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    return xdg_cache / APP_NAME


def setup_logging(*, to_stderr: bool = True) -> Path | None:
    """Log to a new timestamped file; returns its path, or None if unwritable."""
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    formatter = logging.Formatter(_FORMAT)

    if to_stderr:
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        root.addHandler(stream)

    target = log_dir() / datetime.now().strftime("log_%Y%m%d_%H%M%S.log")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(target, encoding="utf-8")
    except OSError as exc:
        logging.getLogger(__name__).warning("Logging to stderr only, cannot open %s: %s", target, exc)
        return None
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)
    return target
