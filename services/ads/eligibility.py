"""Ad eligibility: the ``show_ads`` flag gated by premium access."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from services.feature_flags.flag_service import FeatureFlagService
from services.feature_flags.registry import FeatureFlag
from services.premium.app_state_service import AppStateService


@dataclass(slots=True)
class AdEligibilityError(RuntimeError):
    """Raised when ads must not be shown to the current user."""

    code: str
    message: str

    def __post_init__(self) -> None:
        RuntimeError.__init__(self, self.message)

    def to_detail(self) -> Dict[str, Optional[str]]:
        return {"code": self.code, "message": self.message}


class AdEligibility:
    def __init__(self, *, flags: FeatureFlagService, app_state: AppStateService) -> None:
        self._flags = flags
        self._app_state = app_state

    @property
    def can_show_ads(self) -> bool:
        return not self._app_state.is_premium and self._flags.is_enabled(FeatureFlag.SHOW_ADS)

    def check(self) -> None:
        if self._app_state.is_premium:
            raise AdEligibilityError(code="ads.premium_user", message="Ads are hidden for premium users.")
        if not self._flags.is_enabled(FeatureFlag.SHOW_ADS):
            raise AdEligibilityError(code="ads.disabled", message="Ads are disabled by feature flag.")


__all__ = ["AdEligibility", "AdEligibilityError"]
