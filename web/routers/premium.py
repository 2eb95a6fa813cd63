"""Debug routes for the persisted premium status."""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Body, Depends

from schemas.api.debug import PremiumStatusResponse, TemporaryPremiumRequest
from services.ads.eligibility import AdEligibility
from services.premium.app_state_service import DefaultAppStateService
from services.premium.serializers import serialize_premium
from web.deps import get_ad_eligibility, get_app_state_service

router = APIRouter(prefix="/debug/premium", tags=["Debug"])


@router.get("", response_model=PremiumStatusResponse, summary="Show premium status and ad eligibility.")
def read_premium_status(
    service: DefaultAppStateService = Depends(get_app_state_service),
    ads: AdEligibility = Depends(get_ad_eligibility),
) -> PremiumStatusResponse:
    return serialize_premium(service, ads)


@router.post("/grant", response_model=PremiumStatusResponse, summary="Grant permanent premium.")
def grant_premium(
    service: DefaultAppStateService = Depends(get_app_state_service),
    ads: AdEligibility = Depends(get_ad_eligibility),
) -> PremiumStatusResponse:
    service.grant_premium()
    return serialize_premium(service, ads)


@router.post("/grant-temporary", response_model=PremiumStatusResponse, summary="Grant temporary premium.")
def grant_temporary_premium(
    payload: Optional[TemporaryPremiumRequest] = Body(default=None),
    service: DefaultAppStateService = Depends(get_app_state_service),
    ads: AdEligibility = Depends(get_ad_eligibility),
) -> PremiumStatusResponse:
    duration = timedelta(seconds=payload.durationSeconds) if payload and payload.durationSeconds else None
    service.grant_temporary_premium(duration)
    return serialize_premium(service, ads)


@router.post("/revoke", response_model=PremiumStatusResponse, summary="Revoke premium.")
def revoke_premium(
    service: DefaultAppStateService = Depends(get_app_state_service),
    ads: AdEligibility = Depends(get_ad_eligibility),
) -> PremiumStatusResponse:
    service.revoke_premium()
    return serialize_premium(service, ads)


@router.post("/ad-watched", response_model=PremiumStatusResponse, summary="Record a watched rewarded ad.")
def record_ad_watched(
    service: DefaultAppStateService = Depends(get_app_state_service),
    ads: AdEligibility = Depends(get_ad_eligibility),
) -> PremiumStatusResponse:
    service.record_ad_watched()
    return serialize_premium(service, ads)
