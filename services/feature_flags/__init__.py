"""Feature flag and remote parameter resolution."""

from .errors import NetworkFailure, ParameterKindError, ParameterValueError
from .registry import FeatureFlag, ParameterKey, all_flags, all_parameters
from .resolver import resolve_all_flags, resolve_all_parameters, resolve_value
from .values import ParameterKind, ParameterValue

__all__ = [
    "FeatureFlag",
    "NetworkFailure",
    "ParameterKey",
    "ParameterKind",
    "ParameterKindError",
    "ParameterValue",
    "ParameterValueError",
    "all_flags",
    "all_parameters",
    "resolve_all_flags",
    "resolve_all_parameters",
    "resolve_value",
]
