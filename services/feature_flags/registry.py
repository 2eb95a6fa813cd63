"""Closed registry of feature flags and remotely tunable parameters.

Adding a flag or parameter is an edit to this module: every key carries a
built-in default so resolution can always fall back to it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from core.premium_constants import DEFAULT_TEMPORARY_PREMIUM_SECONDS
from services.feature_flags.values import ParameterKind, ParameterValue


class FeatureFlag(str, Enum):
    SHOW_SUBJECTS_TAB = "show_subjects_tab"
    SHOW_TEACHERS_TAB = "show_teachers_tab"
    ENABLE_ANALYTICS = "enable_analytics"
    SHOW_ADS = "show_ads"
    ENABLE_PUSH_NOTIFICATIONS = "enable_push_notifications"
    DARK_MODE_ONLY = "dark_mode_only"
    SHOW_DEBUG_MENU = "show_debug_menu"

    def __str__(self) -> str:  # pragma: no cover - convenience
        return self.value

    @property
    def definition(self) -> "FlagDefinition":
        return _FLAG_DEFINITIONS[self]

    @property
    def default_value(self) -> bool:
        return self.definition.default

    def default_for(self, *, debug: bool = False) -> bool:
        """Registered default for a release or a debug build."""
        definition = self.definition
        if debug and definition.debug_default is not None:
            return definition.debug_default
        return definition.default

    @property
    def display_name(self) -> str:
        return self.definition.display_name

    @property
    def description(self) -> str:
        return self.definition.description


class ParameterKey(str, Enum):
    BANNER_POSITION = "banner_position"
    BANNER_REFRESH_INTERVAL = "banner_refresh_interval"
    INTERSTITIAL_COOLDOWN = "interstitial_cooldown"
    NATIVE_AD_CACHE_SIZE = "native_ad_cache_size"
    PREMIUM_TRIAL_DURATION = "premium_trial_duration"
    WEEK_SWITCH_COOLDOWN_INTERVAL = "week_switch_cooldown_interval"
    WEEK_SWITCH_ACTIONS_BEFORE_SHOW = "week_switch_actions_before_show"

    def __str__(self) -> str:  # pragma: no cover - convenience
        return self.value

    @property
    def definition(self) -> "ParameterDefinition":
        return _PARAMETER_DEFINITIONS[self]

    @property
    def kind(self) -> ParameterKind:
        return self.definition.kind

    @property
    def default_value(self) -> ParameterValue:
        return self.definition.default

    @property
    def display_name(self) -> str:
        return self.definition.display_name

    @property
    def description(self) -> str:
        return self.definition.description


@dataclass(frozen=True, slots=True)
class FlagDefinition:
    key: str
    default: bool
    display_name: str
    description: str
    debug_default: Optional[bool] = None


@dataclass(frozen=True, slots=True)
class ParameterDefinition:
    key: str
    default: ParameterValue
    display_name: str
    description: str

    @property
    def kind(self) -> ParameterKind:
        return self.default.kind


_FLAG_DEFINITIONS: Dict[FeatureFlag, FlagDefinition] = {
    FeatureFlag.SHOW_SUBJECTS_TAB: FlagDefinition(
        key=FeatureFlag.SHOW_SUBJECTS_TAB.value,
        default=False,
        display_name="Show Subjects Tab",
        description="Display subjects tab in navigation",
    ),
    FeatureFlag.SHOW_TEACHERS_TAB: FlagDefinition(
        key=FeatureFlag.SHOW_TEACHERS_TAB.value,
        default=False,
        display_name="Show Teachers Tab",
        description="Display teachers tab in navigation",
    ),
    FeatureFlag.ENABLE_ANALYTICS: FlagDefinition(
        key=FeatureFlag.ENABLE_ANALYTICS.value,
        default=False,
        display_name="Enable Analytics",
        description="Send analytics data",
    ),
    FeatureFlag.SHOW_ADS: FlagDefinition(
        key=FeatureFlag.SHOW_ADS.value,
        default=True,
        display_name="Show Advertisements",
        description="Display advertisements (disabled for premium users)",
    ),
    FeatureFlag.ENABLE_PUSH_NOTIFICATIONS: FlagDefinition(
        key=FeatureFlag.ENABLE_PUSH_NOTIFICATIONS.value,
        default=False,
        display_name="Enable Push Notifications",
        description="Enable push notifications",
    ),
    FeatureFlag.DARK_MODE_ONLY: FlagDefinition(
        key=FeatureFlag.DARK_MODE_ONLY.value,
        default=False,
        display_name="Dark Mode Only",
        description="Force dark appearance",
    ),
    FeatureFlag.SHOW_DEBUG_MENU: FlagDefinition(
        key=FeatureFlag.SHOW_DEBUG_MENU.value,
        default=False,
        debug_default=True,
        display_name="Show Debug Menu",
        description="Show the debug menu in settings",
    ),
}

_PARAMETER_DEFINITIONS: Dict[ParameterKey, ParameterDefinition] = {
    ParameterKey.BANNER_POSITION: ParameterDefinition(
        key=ParameterKey.BANNER_POSITION.value,
        default=ParameterValue.string("bottom"),
        display_name="Banner Position",
        description="Position of banner ad (bottom, top, aboveTabBar)",
    ),
    ParameterKey.BANNER_REFRESH_INTERVAL: ParameterDefinition(
        key=ParameterKey.BANNER_REFRESH_INTERVAL.value,
        default=ParameterValue.integer(60),
        display_name="Banner Refresh Interval",
        description="How often to refresh banner ads (seconds)",
    ),
    ParameterKey.INTERSTITIAL_COOLDOWN: ParameterDefinition(
        key=ParameterKey.INTERSTITIAL_COOLDOWN.value,
        default=ParameterValue.integer(300),
        display_name="Interstitial Cooldown",
        description="Cooldown between interstitial ads (seconds)",
    ),
    ParameterKey.NATIVE_AD_CACHE_SIZE: ParameterDefinition(
        key=ParameterKey.NATIVE_AD_CACHE_SIZE.value,
        default=ParameterValue.integer(3),
        display_name="Native Ad Cache Size",
        description="Number of native ads to cache",
    ),
    ParameterKey.PREMIUM_TRIAL_DURATION: ParameterDefinition(
        key=ParameterKey.PREMIUM_TRIAL_DURATION.value,
        default=ParameterValue.integer(DEFAULT_TEMPORARY_PREMIUM_SECONDS),
        display_name="Premium Trial Duration",
        description="Duration of premium trial after rewarded ad (seconds)",
    ),
    ParameterKey.WEEK_SWITCH_COOLDOWN_INTERVAL: ParameterDefinition(
        key=ParameterKey.WEEK_SWITCH_COOLDOWN_INTERVAL.value,
        default=ParameterValue.integer(300),
        display_name="Week Switch Cooldown Interval",
        description="Cooldown between interstitial ads for week switches (seconds)",
    ),
    ParameterKey.WEEK_SWITCH_ACTIONS_BEFORE_SHOW: ParameterDefinition(
        key=ParameterKey.WEEK_SWITCH_ACTIONS_BEFORE_SHOW.value,
        default=ParameterValue.integer(3),
        display_name="Week Switch Actions Before Show",
        description="Number of week switch actions before showing interstitial ad",
    ),
}


def all_flags() -> Tuple[FeatureFlag, ...]:
    return tuple(FeatureFlag)


def all_parameters() -> Tuple[ParameterKey, ...]:
    return tuple(ParameterKey)


def parse_flag(key: Union[str, FeatureFlag]) -> FeatureFlag:
    """Return the flag for ``key``; raises ``ValueError`` for unknown keys."""
    return FeatureFlag(key)


def parse_parameter(key: Union[str, ParameterKey]) -> ParameterKey:
    """Return the parameter for ``key``; raises ``ValueError`` for unknown keys."""
    return ParameterKey(key)


__all__ = [
    "FeatureFlag",
    "FlagDefinition",
    "ParameterDefinition",
    "ParameterKey",
    "all_flags",
    "all_parameters",
    "parse_flag",
    "parse_parameter",
]
