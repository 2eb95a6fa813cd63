"""In-memory resolved state held by the flag and parameter services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from core.time_utils import as_utc
from schemas.feature_flags import FlagStateDocument, ParameterStateDocument, ParameterValuePayload
from services.feature_flags.values import ParameterValue


@dataclass(slots=True)
class FlagState:
    local_overrides: Dict[str, bool] = field(default_factory=dict)
    remote_flags: Dict[str, bool] = field(default_factory=dict)
    version: Optional[str] = None
    last_sync: Optional[datetime] = None

    @classmethod
    def empty(cls) -> "FlagState":
        return cls()

    def copy(self) -> "FlagState":
        return FlagState(
            local_overrides=dict(self.local_overrides),
            remote_flags=dict(self.remote_flags),
            version=self.version,
            last_sync=self.last_sync,
        )

    def to_document(self) -> Dict[str, Any]:
        return FlagStateDocument(
            localOverrides=self.local_overrides,
            remoteFlags=self.remote_flags,
            version=self.version,
            lastSync=self.last_sync,
        ).model_dump(mode="json")

    @classmethod
    def from_document(cls, payload: Mapping[str, Any]) -> "FlagState":
        document = FlagStateDocument.model_validate(payload)
        return cls(
            local_overrides=dict(document.localOverrides),
            remote_flags=dict(document.remoteFlags),
            version=document.version,
            last_sync=as_utc(document.lastSync),
        )


@dataclass(slots=True)
class ParameterState:
    local_overrides: Dict[str, ParameterValue] = field(default_factory=dict)
    remote_parameters: Dict[str, ParameterValue] = field(default_factory=dict)
    last_sync: Optional[datetime] = None

    @classmethod
    def empty(cls) -> "ParameterState":
        return cls()

    def copy(self) -> "ParameterState":
        # ParameterValue is immutable, so shallow copies are enough.
        return ParameterState(
            local_overrides=dict(self.local_overrides),
            remote_parameters=dict(self.remote_parameters),
            last_sync=self.last_sync,
        )

    def to_document(self) -> Dict[str, Any]:
        return ParameterStateDocument(
            localOverrides={key: ParameterValuePayload.from_value(value) for key, value in self.local_overrides.items()},
            remoteParameters={
                key: ParameterValuePayload.from_value(value) for key, value in self.remote_parameters.items()
            },
            lastSync=self.last_sync,
        ).model_dump(mode="json")

    @classmethod
    def from_document(cls, payload: Mapping[str, Any]) -> "ParameterState":
        document = ParameterStateDocument.model_validate(payload)
        return cls(
            local_overrides={key: entry.to_value() for key, entry in document.localOverrides.items()},
            remote_parameters={key: entry.to_value() for key, entry in document.remoteParameters.items()},
            last_sync=as_utc(document.lastSync),
        )


__all__ = ["FlagState", "ParameterState"]
