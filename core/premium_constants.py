"""Shared premium constants used across services and routers."""

from __future__ import annotations

from enum import Enum


class PremiumTier(str, Enum):
    FREE = "free"
    PERMANENT = "permanent"
    TEMPORARY = "temporary"

    def __str__(self) -> str:  # pragma: no cover - convenience
        return self.value


# Length of a temporary premium grant earned by watching a rewarded ad.
DEFAULT_TEMPORARY_PREMIUM_SECONDS = 3600

__all__ = ["DEFAULT_TEMPORARY_PREMIUM_SECONDS", "PremiumTier"]
