"""Persisted premium status plus rewarded-ad counters."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from core.time_utils import as_utc
from schemas.app_state import AppStateDocument, PremiumStatusPayload
from services.feature_flags.storage import JsonStateStorage
from services.json_store import KeyValueStore
from services.premium.access import PremiumStatus

APP_STATE_KEY = "app_state"


@dataclass(frozen=True, slots=True)
class AppState:
    premium_status: PremiumStatus = field(default_factory=PremiumStatus.free)
    premium_purchase_date: Optional[datetime] = None
    last_ad_watched_at: Optional[datetime] = None
    total_ads_watched: int = 0

    @classmethod
    def default(cls) -> "AppState":
        return cls()

    def copy(self) -> "AppState":
        return replace(self)

    def to_document(self) -> Dict[str, Any]:
        return AppStateDocument(
            premiumStatus=PremiumStatusPayload(
                status=self.premium_status.tier,
                expiresAt=self.premium_status.expires_at,
            ),
            premiumPurchaseDate=self.premium_purchase_date,
            lastAdWatchedDate=self.last_ad_watched_at,
            totalAdsWatched=self.total_ads_watched,
        ).model_dump(mode="json")

    @classmethod
    def from_document(cls, payload: Mapping[str, Any]) -> "AppState":
        document = AppStateDocument.model_validate(payload)
        status = PremiumStatus(document.premiumStatus.status, as_utc(document.premiumStatus.expiresAt))
        return cls(
            premium_status=status,
            premium_purchase_date=as_utc(document.premiumPurchaseDate),
            last_ad_watched_at=as_utc(document.lastAdWatchedDate),
            total_ads_watched=document.totalAdsWatched,
        )


def app_state_storage(backend: KeyValueStore, *, key: str = APP_STATE_KEY) -> JsonStateStorage[AppState]:
    return JsonStateStorage(
        backend,
        key=key,
        empty=AppState.default,
        decode=AppState.from_document,
        encode=lambda state: state.to_document(),
    )


__all__ = ["APP_STATE_KEY", "AppState", "app_state_storage"]
