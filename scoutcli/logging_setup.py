# logging_setup.py
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List, Optional, Union

from loguru import logger

from .config_home import LOGS_DIR

LOG_LEVEL_ENV = "SCOUTCLI_LOG_LEVEL"
DEFAULT_LOG_FILE = "scoutcli.log"

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "{level:<7} | "
    "{name}:{function}:{line} | "
    "{message}"
)
_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

_sinks: List[int] = []


def resolve_level(level: Optional[str] = None) -> str:
    """Explicit level, else $SCOUTCLI_LOG_LEVEL, else INFO. Unknown names fall back to INFO."""
    name = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").strip().upper()
    if name == "WARN":
        name = "WARNING"
    return name if name in _LEVELS else "INFO"


def log_file_path(target: Optional[Union[str, Path]] = None) -> Path:
    """Where the file sink writes; a directory target gets the default file name."""
    path = Path(target) if target is not None else LOGS_DIR / DEFAULT_LOG_FILE
    if not path.suffix:
        path = path / DEFAULT_LOG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def configure_logging(
    level: Optional[str] = None,
    *,
    console: bool = False,
    log_file: Optional[Union[str, Path]] = None,
    rotation: str = "5 MB",
    retention: Union[int, str] = 10,
) -> Path:
    """
    Install scoutcli's sinks, replacing any configured before.

    The chat prompt owns the terminal, so stderr logging is opt-in
    (``--verbose``). The rotating file sink is always on and its path is
    returned.
    """
    global _sinks
    logger.remove()
    _sinks = []
    resolved = resolve_level(level)

    if console:
        _sinks.append(logger.add(sys.stderr, level=resolved, format=_FORMAT))

    path = log_file_path(log_file)
    _sinks.append(
        logger.add(
            str(path),
            level=resolved,
            format=_FORMAT,
            rotation=rotation,
            retention=retention,
            encoding="utf-8",
        )
    )
    logger.debug("Logging configured: level={} console={} file='{}'", resolved, console, str(path))
    return path
