"""Response builder for the premium debug routes."""

from __future__ import annotations

from schemas.api.debug import PremiumStatusResponse
from services.ads.eligibility import AdEligibility
from services.feature_flags.serializers import iso_or_none
from services.premium.app_state_service import DefaultAppStateService


def serialize_premium(service: DefaultAppStateService, ads: AdEligibility) -> PremiumStatusResponse:
    state = service.state
    access = service.premium_access()
    remaining = access.time_remaining
    return PremiumStatusResponse(
        status=state.premium_status.tier,
        isPremium=access.is_premium,
        expiresAt=iso_or_none(access.expires_at),
        secondsRemaining=int(remaining.total_seconds()) if remaining is not None else None,
        premiumPurchaseDate=iso_or_none(state.premium_purchase_date),
        lastAdWatchedDate=iso_or_none(state.last_ad_watched_at),
        totalAdsWatched=state.total_ads_watched,
        canShowAds=ads.can_show_ads,
    )


__all__ = ["serialize_premium"]
