"""FastAPI routers for the debug surface."""

from __future__ import annotations

from . import feature_flags, premium

__all__ = ["feature_flags", "premium"]
