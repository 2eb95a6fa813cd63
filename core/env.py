"""Environment variable helpers with logged fallbacks."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from core.logging import get_logger

logger = get_logger(__name__)

_TRUTHY = {"1", "true", "yes", "y", "on"}
_FALSY = {"0", "false", "no", "n", "off"}


def load_dotenv_if_available(path: Path | None = None) -> bool:
    """Load ``.env`` values without overriding variables already exported."""

    env_path = path or Path(".env")
    if not env_path.exists():
        return False
    loaded = load_dotenv(dotenv_path=env_path, override=False)
    logger.debug("Loaded environment variables from %s", env_path)
    return bool(loaded)


def env_str(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def env_int(key: str, default: int, *, minimum: Optional[int] = None) -> int:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid integer env %s='%s'. Using default=%d.", key, raw, default)
        return default
    if minimum is not None and value < minimum:
        logger.warning("Env %s=%d is below minimum %d. Using default=%d.", key, value, minimum, default)
        return default
    return value


def env_float(key: str, default: float, *, minimum: Optional[float] = None) -> float:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float env %s='%s'. Using default=%.2f.", key, raw, default)
        return default
    if minimum is not None and value < minimum:
        logger.warning("Env %s=%.2f is below minimum %.2f. Using default=%.2f.", key, value, minimum, default)
        return default
    return value


def env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    logger.warning("Invalid boolean env %s='%s'. Using default=%s.", key, raw, default)
    return default


def env_path(key: str, default: Path) -> Path:
    raw = env_str(key)
    if raw is None:
        return Path(default)
    return Path(raw).expanduser()


__all__ = [
    "env_bool",
    "env_float",
    "env_int",
    "env_path",
    "env_str",
    "load_dotenv_if_available",
]
