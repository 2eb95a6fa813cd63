"""Pydantic schemas for the feature flag debug API."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from core.premium_constants import PremiumTier
from services.feature_flags.values import ParameterKind


class FeatureFlagEntrySchema(BaseModel):
    key: str
    displayName: str
    description: str
    defaultValue: bool
    enabled: bool = Field(..., description="Resolved value after override > remote > default.")
    hasLocalOverride: bool


class FeatureFlagListResponse(BaseModel):
    flags: List[FeatureFlagEntrySchema]
    version: Optional[str] = Field(default=None, description="Version tag of the last remote sync.")
    lastSync: Optional[str] = Field(default=None, description="ISO timestamp of the last successful sync.")


class FeatureFlagOverrideRequest(BaseModel):
    enabled: bool


class ParameterEntrySchema(BaseModel):
    key: str
    displayName: str
    description: str
    kind: ParameterKind
    defaultValue: Any
    value: Any = Field(..., description="Resolved value after override > remote > default.")
    hasLocalOverride: bool


class ParameterListResponse(BaseModel):
    parameters: List[ParameterEntrySchema]
    lastSync: Optional[str] = None


class ParameterOverrideRequest(BaseModel):
    kind: ParameterKind
    value: Any


class PremiumStatusResponse(BaseModel):
    status: PremiumTier
    isPremium: bool
    expiresAt: Optional[str] = None
    secondsRemaining: Optional[int] = None
    premiumPurchaseDate: Optional[str] = None
    lastAdWatchedDate: Optional[str] = None
    totalAdsWatched: int = 0
    canShowAds: bool


class TemporaryPremiumRequest(BaseModel):
    durationSeconds: Optional[int] = Field(
        default=None,
        ge=1,
        description="Grant length in seconds. Defaults to the premium_trial_duration parameter.",
    )


__all__ = [
    "FeatureFlagEntrySchema",
    "FeatureFlagListResponse",
    "FeatureFlagOverrideRequest",
    "ParameterEntrySchema",
    "ParameterListResponse",
    "ParameterOverrideRequest",
    "PremiumStatusResponse",
    "TemporaryPremiumRequest",
]
