"""Shared logging helpers."""

from __future__ import annotations

import logging
import os
from typing import Optional

_CONFIGURED = False
_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _level_from_env(default: int) -> int:
    raw = (os.getenv("LOG_LEVEL") or "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def setup_logging(level: Optional[int] = None, *, fmt: Optional[str] = None) -> None:
    """Configure the root logger once; later calls are no-ops."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    resolved = level if level is not None else _level_from_env(logging.INFO)
    logging.basicConfig(level=resolved, format=fmt or _DEFAULT_FORMAT)
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring the root logger on first use."""
    setup_logging()
    return logging.getLogger(name)


__all__ = ["get_logger", "setup_logging"]
