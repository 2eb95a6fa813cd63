"""Premium status variants and the access view derived from them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from core.premium_constants import PremiumTier


@dataclass(frozen=True, slots=True)
class PremiumStatus:
    """``free``, ``permanent``, or ``temporary`` until ``expires_at``."""

    tier: PremiumTier
    expires_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        tier = PremiumTier(self.tier)
        object.__setattr__(self, "tier", tier)
        if tier is PremiumTier.TEMPORARY and self.expires_at is None:
            raise ValueError("Temporary premium requires an expiry.")
        if tier is not PremiumTier.TEMPORARY and self.expires_at is not None:
            raise ValueError(f"{tier.value} premium does not expire.")

    @classmethod
    def free(cls) -> "PremiumStatus":
        return cls(PremiumTier.FREE)

    @classmethod
    def permanent(cls) -> "PremiumStatus":
        return cls(PremiumTier.PERMANENT)

    @classmethod
    def temporary(cls, expires_at: datetime) -> "PremiumStatus":
        return cls(PremiumTier.TEMPORARY, expires_at)

    def is_expired(self, *, now: datetime) -> bool:
        return self.tier is PremiumTier.TEMPORARY and now >= self.expires_at  # type: ignore[operator]


@dataclass(frozen=True, slots=True)
class PremiumAccess:
    is_premium: bool
    time_remaining: Optional[timedelta] = None
    expires_at: Optional[datetime] = None


def evaluate_premium_access(status: PremiumStatus, *, now: datetime) -> PremiumAccess:
    """Project ``status`` at ``now``. Nothing is cached, so pass a fresh ``now``."""

    if status.tier is PremiumTier.PERMANENT:
        return PremiumAccess(is_premium=True)
    if status.tier is PremiumTier.TEMPORARY:
        expires_at = status.expires_at
        remaining = max(timedelta(0), expires_at - now)  # type: ignore[operator]
        return PremiumAccess(is_premium=now < expires_at, time_remaining=remaining, expires_at=expires_at)  # type: ignore[operator]
    return PremiumAccess(is_premium=False)


__all__ = ["PremiumAccess", "PremiumStatus", "evaluate_premium_access"]
