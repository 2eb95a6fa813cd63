"""Pydantic documents for persisted feature flag state and remote snapshots."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, StrictStr, model_validator

from services.feature_flags.values import ParameterKind, ParameterValue


class ParameterValuePayload(BaseModel):
    """Tagged parameter value, keeping the kind across serialization."""

    kind: ParameterKind
    value: Union[StrictBool, StrictInt, StrictFloat, StrictStr, List[StrictStr]]

    @model_validator(mode="after")
    def _kind_matches_value(self) -> "ParameterValuePayload":
        self.to_value()
        return self

    def to_value(self) -> ParameterValue:
        return ParameterValue.from_payload({"kind": self.kind, "value": self.value})

    @classmethod
    def from_value(cls, value: ParameterValue) -> "ParameterValuePayload":
        return cls(kind=value.kind, value=value.to_json())


class FlagStateDocument(BaseModel):
    localOverrides: Dict[str, StrictBool] = Field(default_factory=dict)
    remoteFlags: Dict[str, StrictBool] = Field(default_factory=dict)
    version: Optional[str] = None
    lastSync: Optional[datetime] = None


class ParameterStateDocument(BaseModel):
    localOverrides: Dict[str, ParameterValuePayload] = Field(default_factory=dict)
    remoteParameters: Dict[str, ParameterValuePayload] = Field(default_factory=dict)
    lastSync: Optional[datetime] = None


class FeatureFlagsResponse(BaseModel):
    flags: Dict[str, StrictBool]
    version: str
    updatedAt: str


class FeatureParametersResponse(BaseModel):
    parameters: Dict[str, Any]
    version: str
    updatedAt: str


__all__ = [
    "FeatureFlagsResponse",
    "FeatureParametersResponse",
    "FlagStateDocument",
    "ParameterStateDocument",
    "ParameterValuePayload",
]
