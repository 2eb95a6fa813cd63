"""HTTP client fetching flag and parameter snapshots from the backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

import httpx
from pydantic import ValidationError

from core.settings import DEFAULT_API_BASE_URL
from schemas.feature_flags import FeatureFlagsResponse, FeatureParametersResponse
from services.feature_flags.errors import NetworkFailure, ParameterValueError
from services.feature_flags.registry import ParameterKey
from services.feature_flags.values import ParameterValue

logger = logging.getLogger(__name__)

FLAGS_ENDPOINT = "/api/feature-flags"
PARAMETERS_ENDPOINT = "/api/feature-parameters"
DEFAULT_TIMEOUT_SECONDS = 300.0


@dataclass(frozen=True, slots=True)
class FlagsSnapshot:
    values: Dict[str, bool]
    version: str
    updated_at: str


@dataclass(frozen=True, slots=True)
class ParametersSnapshot:
    values: Dict[str, ParameterValue]
    version: str
    updated_at: str


class FlagsRemoteSource(Protocol):
    def fetch_flags(self) -> FlagsSnapshot:
        ...


class ParametersRemoteSource(Protocol):
    def fetch_parameters(self) -> ParametersSnapshot:
        ...


def _expected_kind(key: str):
    try:
        return ParameterKey(key).kind
    except ValueError:
        return None


@dataclass(slots=True)
class FeatureFlagsApiClient:
    """Stateless request/response wrapper; callers own retry policy."""

    base_url: str = DEFAULT_API_BASE_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    transport: Optional[httpx.BaseTransport] = field(default=None, repr=False)

    def _get_json(self, endpoint: str) -> Any:
        url = f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"
        headers = {"Accept": "application/json"}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Feature flag request to %s failed: %s", url, exc)
            raise NetworkFailure(f"Request to {endpoint} failed: {exc}", endpoint=endpoint) from exc
        if not response.is_success:
            logger.warning("Feature flag endpoint %s returned HTTP %s", url, response.status_code)
            raise NetworkFailure(
                f"{endpoint} returned HTTP {response.status_code}",
                status_code=response.status_code,
                endpoint=endpoint,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkFailure(f"{endpoint} returned a non-JSON body", endpoint=endpoint) from exc

    def fetch_flags(self) -> FlagsSnapshot:
        payload = self._get_json(FLAGS_ENDPOINT)
        try:
            response = FeatureFlagsResponse.model_validate(payload)
        except ValidationError as exc:
            raise NetworkFailure(f"Invalid flags payload: {exc}", endpoint=FLAGS_ENDPOINT) from exc
        return FlagsSnapshot(values=dict(response.flags), version=response.version, updated_at=response.updatedAt)

    def fetch_parameters(self) -> ParametersSnapshot:
        payload = self._get_json(PARAMETERS_ENDPOINT)
        try:
            response = FeatureParametersResponse.model_validate(payload)
            values = {
                key: ParameterValue.from_json(raw, expected=_expected_kind(key))
                for key, raw in response.parameters.items()
            }
        except (ValidationError, ParameterValueError) as exc:
            raise NetworkFailure(f"Invalid parameters payload: {exc}", endpoint=PARAMETERS_ENDPOINT) from exc
        return ParametersSnapshot(values=values, version=response.version, updated_at=response.updatedAt)


__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "FLAGS_ENDPOINT",
    "FeatureFlagsApiClient",
    "FlagsRemoteSource",
    "FlagsSnapshot",
    "PARAMETERS_ENDPOINT",
    "ParametersRemoteSource",
    "ParametersSnapshot",
]
