"""Pydantic documents for the persisted app (premium) state."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from core.premium_constants import PremiumTier


class PremiumStatusPayload(BaseModel):
    status: PremiumTier = PremiumTier.FREE
    expiresAt: Optional[datetime] = None

    @model_validator(mode="after")
    def _expiry_matches_status(self) -> "PremiumStatusPayload":
        if self.status is PremiumTier.TEMPORARY and self.expiresAt is None:
            raise ValueError("temporary premium requires expiresAt")
        if self.status is not PremiumTier.TEMPORARY and self.expiresAt is not None:
            raise ValueError(f"{self.status.value} premium cannot carry expiresAt")
        return self


class AppStateDocument(BaseModel):
    premiumStatus: PremiumStatusPayload = Field(default_factory=PremiumStatusPayload)
    premiumPurchaseDate: Optional[datetime] = None
    lastAdWatchedDate: Optional[datetime] = None
    totalAdsWatched: int = Field(default=0, ge=0)


__all__ = ["AppStateDocument", "PremiumStatusPayload"]
