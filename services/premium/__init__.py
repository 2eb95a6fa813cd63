"""Premium status, access evaluation and the app-state service."""

from .access import PremiumAccess, PremiumStatus, evaluate_premium_access

__all__ = ["PremiumAccess", "PremiumStatus", "evaluate_premium_access"]
