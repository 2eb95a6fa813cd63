"""Runtime settings for the feature flag and premium services."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.env import env_bool, env_float, env_int, env_path, env_str, load_dotenv_if_available

DEFAULT_API_BASE_URL = "https://api.dsw.wtf"
DEFAULT_APP_STATE_PATH = Path("var") / "app_state.json"


@dataclass(frozen=True, slots=True)
class Settings:
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout_seconds: float = 300.0
    sync_interval_seconds: int = 3600
    auto_sync: bool = True
    hydration_timeout_seconds: float = 5.0
    app_state_path: Path = DEFAULT_APP_STATE_PATH
    temporary_premium_seconds: int = 3600
    debug: bool = False


def load_settings(*, dotenv_path: Optional[Path] = None) -> Settings:
    """Build :class:`Settings` from the environment (and ``.env`` when present)."""

    load_dotenv_if_available(dotenv_path)
    return Settings(
        api_base_url=env_str("FEATURE_FLAGS_API_BASE_URL", DEFAULT_API_BASE_URL) or DEFAULT_API_BASE_URL,
        request_timeout_seconds=env_float("FEATURE_FLAGS_REQUEST_TIMEOUT_SECONDS", 300.0, minimum=0.1),
        sync_interval_seconds=env_int("FEATURE_FLAGS_SYNC_INTERVAL_SECONDS", 3600, minimum=0),
        auto_sync=env_bool("FEATURE_FLAGS_AUTO_SYNC", True),
        hydration_timeout_seconds=env_float("FEATURE_FLAGS_HYDRATION_TIMEOUT_SECONDS", 5.0, minimum=0.0),
        app_state_path=env_path("APP_STATE_FILE", DEFAULT_APP_STATE_PATH),
        temporary_premium_seconds=env_int("PREMIUM_TEMPORARY_DURATION_SECONDS", 3600, minimum=1),
        debug=env_bool("APP_DEBUG", False),
    )


__all__ = ["DEFAULT_API_BASE_URL", "DEFAULT_APP_STATE_PATH", "Settings", "load_settings"]
