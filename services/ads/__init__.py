"""Ad gating helpers built on feature flags and premium access."""

from .eligibility import AdEligibility, AdEligibilityError
from .interstitial_cooldown import CooldownConfiguration, InterstitialCooldown

__all__ = ["AdEligibility", "AdEligibilityError", "CooldownConfiguration", "InterstitialCooldown"]
