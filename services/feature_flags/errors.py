"""Exceptions raised by the feature flag subsystem."""

from __future__ import annotations

from typing import Any, Dict, Optional


class NetworkFailure(RuntimeError):
    """Raised when a remote snapshot cannot be fetched or decoded."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, endpoint: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint

    def to_detail(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"code": "feature_flags.sync_failed", "message": str(self)}
        if self.status_code is not None:
            detail["statusCode"] = self.status_code
        return detail


class ParameterValueError(ValueError):
    """Raised when a raw value cannot be represented as a parameter value."""


class ParameterKindError(ParameterValueError):
    """Raised when a parameter value does not match the declared kind."""

    def __init__(self, key: str, expected: str, actual: str) -> None:
        super().__init__(f"Parameter '{key}' expects kind '{expected}', got '{actual}'.")
        self.key = key
        self.expected = expected
        self.actual = actual


__all__ = ["NetworkFailure", "ParameterKindError", "ParameterValueError"]
