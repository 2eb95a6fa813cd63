"""Precedence resolution for flags and parameters.

A local override beats a remote value, and a remote value beats the built-in
default. These helpers are pure; services call them with their current state.
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional, TypeVar

from services.feature_flags.registry import FeatureFlag, ParameterKey, all_flags, all_parameters
from services.feature_flags.values import ParameterValue

logger = logging.getLogger(__name__)

V = TypeVar("V")


def resolve_value(default: V, override: Optional[V] = None, remote: Optional[V] = None) -> V:
    if override is not None:
        return override
    if remote is not None:
        return remote
    return default


def resolve_flag(
    flag: FeatureFlag,
    *,
    local_overrides: Mapping[str, bool],
    remote_flags: Mapping[str, bool],
    debug: bool = False,
) -> bool:
    return resolve_value(
        flag.default_for(debug=debug),
        override=local_overrides.get(flag.value),
        remote=remote_flags.get(flag.value),
    )


def resolve_all_flags(
    local_overrides: Mapping[str, bool],
    remote_flags: Mapping[str, bool],
    *,
    debug: bool = False,
) -> Dict[FeatureFlag, bool]:
    """Resolve every registered flag; keys outside the registry are ignored."""
    return {
        flag: resolve_flag(flag, local_overrides=local_overrides, remote_flags=remote_flags, debug=debug)
        for flag in all_flags()
    }


def _matching_kind(key: ParameterKey, candidate: Optional[ParameterValue], source: str) -> Optional[ParameterValue]:
    if candidate is None:
        return None
    if candidate.kind is not key.kind:
        logger.warning(
            "Ignoring %s value for parameter %s: expected kind %s, got %s.",
            source,
            key.value,
            key.kind.value,
            candidate.kind.value,
        )
        return None
    return candidate


def resolve_parameter(
    key: ParameterKey,
    *,
    local_overrides: Mapping[str, ParameterValue],
    remote_values: Mapping[str, ParameterValue],
) -> ParameterValue:
    """Resolve one parameter, skipping candidates of the wrong kind."""
    return resolve_value(
        key.default_value,
        override=_matching_kind(key, local_overrides.get(key.value), "override"),
        remote=_matching_kind(key, remote_values.get(key.value), "remote"),
    )


def resolve_all_parameters(
    local_overrides: Mapping[str, ParameterValue],
    remote_values: Mapping[str, ParameterValue],
) -> Dict[ParameterKey, ParameterValue]:
    return {
        key: resolve_parameter(key, local_overrides=local_overrides, remote_values=remote_values)
        for key in all_parameters()
    }


__all__ = [
    "resolve_all_flags",
    "resolve_all_parameters",
    "resolve_flag",
    "resolve_parameter",
    "resolve_value",
]
