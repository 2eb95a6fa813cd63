"""Response builders for the flag and parameter debug routes."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.api.debug import (
    FeatureFlagEntrySchema,
    FeatureFlagListResponse,
    ParameterEntrySchema,
    ParameterListResponse,
)
from services.feature_flags.flag_service import DefaultFeatureFlagService
from services.feature_flags.parameter_service import DefaultParameterService


def iso_or_none(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_flags(service: DefaultFeatureFlagService) -> FeatureFlagListResponse:
    snapshot, overridden = service.snapshot_with_overrides()
    entries = [
        FeatureFlagEntrySchema(
            key=flag.value,
            displayName=flag.display_name,
            description=flag.description,
            defaultValue=flag.default_for(debug=service.debug),
            enabled=enabled,
            hasLocalOverride=flag.value in overridden,
        )
        for flag, enabled in snapshot.items()
    ]
    return FeatureFlagListResponse(flags=entries, version=service.version, lastSync=iso_or_none(service.last_sync))


def serialize_parameters(service: DefaultParameterService) -> ParameterListResponse:
    snapshot, overridden = service.snapshot_with_overrides()
    entries = [
        ParameterEntrySchema(
            key=key.value,
            displayName=key.display_name,
            description=key.description,
            kind=key.kind,
            defaultValue=key.default_value.to_json(),
            value=value.to_json(),
            hasLocalOverride=key.value in overridden,
        )
        for key, value in snapshot.items()
    ]
    return ParameterListResponse(parameters=entries, lastSync=iso_or_none(service.last_sync))


__all__ = ["iso_or_none", "serialize_flags", "serialize_parameters"]
