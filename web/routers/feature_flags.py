"""Debug routes for inspecting and overriding flags and parameters."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from schemas.api.debug import (
    FeatureFlagListResponse,
    FeatureFlagOverrideRequest,
    ParameterListResponse,
    ParameterOverrideRequest,
)
from services.feature_flags.errors import NetworkFailure, ParameterKindError, ParameterValueError
from services.feature_flags.flag_service import DefaultFeatureFlagService
from services.feature_flags.parameter_service import DefaultParameterService
from services.feature_flags.registry import FeatureFlag, ParameterKey, parse_flag, parse_parameter
from services.feature_flags.serializers import serialize_flags, serialize_parameters
from services.feature_flags.values import ParameterValue
from web.deps import get_flag_service, get_parameter_service

router = APIRouter(prefix="/debug", tags=["Debug"])


def _flag_or_404(key: str) -> FeatureFlag:
    try:
        return parse_flag(key)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "feature_flags.unknown_key", "message": f"Unknown feature flag '{key}'."},
        ) from exc


def _parameter_or_404(key: str) -> ParameterKey:
    try:
        return parse_parameter(key)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "feature_parameters.unknown_key", "message": f"Unknown parameter '{key}'."},
        ) from exc


def _sync_failed(exc: NetworkFailure) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.to_detail())


@router.get("/feature-flags", response_model=FeatureFlagListResponse, summary="List resolved feature flags.")
def list_feature_flags(service: DefaultFeatureFlagService = Depends(get_flag_service)) -> FeatureFlagListResponse:
    return serialize_flags(service)


@router.post("/feature-flags/sync", response_model=FeatureFlagListResponse, summary="Sync flags from the backend.")
def sync_feature_flags(service: DefaultFeatureFlagService = Depends(get_flag_service)) -> FeatureFlagListResponse:
    try:
        service.sync_from_remote()
    except NetworkFailure as exc:
        raise _sync_failed(exc) from exc
    return serialize_flags(service)


@router.put("/feature-flags/{key}", response_model=FeatureFlagListResponse, summary="Set a local flag override.")
def override_feature_flag(
    key: str,
    payload: FeatureFlagOverrideRequest,
    service: DefaultFeatureFlagService = Depends(get_flag_service),
) -> FeatureFlagListResponse:
    service.set_enabled(_flag_or_404(key), payload.enabled)
    return serialize_flags(service)


@router.delete("/feature-flags/{key}", response_model=FeatureFlagListResponse, summary="Remove a flag override.")
def reset_feature_flag(
    key: str,
    service: DefaultFeatureFlagService = Depends(get_flag_service),
) -> FeatureFlagListResponse:
    service.reset(_flag_or_404(key))
    return serialize_flags(service)


@router.delete("/feature-flags", response_model=FeatureFlagListResponse, summary="Remove every flag override.")
def reset_all_feature_flags(service: DefaultFeatureFlagService = Depends(get_flag_service)) -> FeatureFlagListResponse:
    service.reset_all()
    return serialize_flags(service)


@router.get("/feature-parameters", response_model=ParameterListResponse, summary="List resolved parameters.")
def list_parameters(service: DefaultParameterService = Depends(get_parameter_service)) -> ParameterListResponse:
    return serialize_parameters(service)


@router.post(
    "/feature-parameters/sync",
    response_model=ParameterListResponse,
    summary="Sync parameters from the backend.",
)
def sync_parameters(service: DefaultParameterService = Depends(get_parameter_service)) -> ParameterListResponse:
    try:
        service.sync_from_remote()
    except NetworkFailure as exc:
        raise _sync_failed(exc) from exc
    return serialize_parameters(service)


@router.put(
    "/feature-parameters/{key}",
    response_model=ParameterListResponse,
    summary="Set a local parameter override.",
)
def override_parameter(
    key: str,
    payload: ParameterOverrideRequest,
    service: DefaultParameterService = Depends(get_parameter_service),
) -> ParameterListResponse:
    parameter = _parameter_or_404(key)
    try:
        service.set_value(parameter, ParameterValue.from_payload({"kind": payload.kind, "value": payload.value}))
    except ParameterKindError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "feature_parameters.kind_mismatch", "message": str(exc)},
        ) from exc
    except ParameterValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "feature_parameters.invalid_value", "message": str(exc)},
        ) from exc
    return serialize_parameters(service)


@router.delete(
    "/feature-parameters/{key}",
    response_model=ParameterListResponse,
    summary="Remove a parameter override.",
)
def reset_parameter(
    key: str,
    service: DefaultParameterService = Depends(get_parameter_service),
) -> ParameterListResponse:
    service.reset(_parameter_or_404(key))
    return serialize_parameters(service)


@router.delete(
    "/feature-parameters",
    response_model=ParameterListResponse,
    summary="Remove every parameter override.",
)
def reset_all_parameters(service: DefaultParameterService = Depends(get_parameter_service)) -> ParameterListResponse:
    service.reset_all()
    return serialize_parameters(service)
