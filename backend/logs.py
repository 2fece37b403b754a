from __future__ import annotations

import logging
import os
import sys

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Handler we installed on the root logger, so repeated calls don't stack handlers.
_HANDLER: logging.Handler | None = None


def default_log_level() -> str:
    return (os.getenv("DISTRICT_MAP_LOG_LEVEL") or "INFO").strip().upper()


def configure_logging(level: str | int | None = None) -> None:
    """
    Install one stdout handler on the root logger.

    Safe to call more than once (tests, reloads); only the level is updated then.
    """
    global _HANDLER
    lvl = level if level is not None else default_log_level()
    if isinstance(lvl, str):
        lvl = logging.getLevelName(lvl)
        if not isinstance(lvl, int):
            lvl = logging.INFO

    root = logging.getLogger()
    if _HANDLER is None:
        _HANDLER = logging.StreamHandler(sys.stdout)
        _HANDLER.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
        root.addHandler(_HANDLER)
    root.setLevel(lvl)
