"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from services.ads.eligibility import AdEligibility
from services.bootstrap import AppServices
from services.feature_flags.flag_service import DefaultFeatureFlagService
from services.feature_flags.parameter_service import DefaultParameterService
from services.premium.app_state_service import DefaultAppStateService


def get_app_services(request: Request) -> AppServices:
    """Return the services built by the application's composition root."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": "app.services_unavailable", "message": "Services are not initialised."},
        )
    return services


def get_flag_service(services: AppServices = Depends(get_app_services)) -> DefaultFeatureFlagService:
    return services.flags


def get_parameter_service(services: AppServices = Depends(get_app_services)) -> DefaultParameterService:
    return services.parameters


def get_app_state_service(services: AppServices = Depends(get_app_services)) -> DefaultAppStateService:
    return services.app_state


def get_ad_eligibility(services: AppServices = Depends(get_app_services)) -> AdEligibility:
    return services.ads
