"""Cadence rules for interstitial ads."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from core.time_utils import utc_now
from services.feature_flags.parameter_service import ParameterService
from services.feature_flags.registry import ParameterKey

WEEK_SWITCH_COOLDOWN_SECONDS = 300
WEEK_SWITCH_ACTIONS_BEFORE_SHOW = 3


@dataclass(frozen=True, slots=True)
class CooldownConfiguration:
    cooldown_seconds: float
    actions_before_show: int

    @classmethod
    def week_switch(cls, parameters: Optional[ParameterService]) -> "CooldownConfiguration":
        cooldown: Optional[int] = None
        actions: Optional[int] = None
        if parameters is not None:
            cooldown = parameters.get_value(ParameterKey.WEEK_SWITCH_COOLDOWN_INTERVAL, int)
            actions = parameters.get_value(ParameterKey.WEEK_SWITCH_ACTIONS_BEFORE_SHOW, int)
        return cls(
            cooldown_seconds=float(cooldown if cooldown is not None else WEEK_SWITCH_COOLDOWN_SECONDS),
            actions_before_show=actions if actions is not None else WEEK_SWITCH_ACTIONS_BEFORE_SHOW,
        )


class InterstitialCooldown:
    """An ad is due once enough actions happened and the cooldown elapsed."""

    def __init__(
        self,
        configuration: CooldownConfiguration,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._configuration = configuration
        self._clock = clock
        self._lock = threading.Lock()
        self._last_shown_at: Optional[datetime] = None
        self._actions = 0

    @property
    def actions(self) -> int:
        with self._lock:
            return self._actions

    def should_show_ad(self, now: Optional[datetime] = None) -> bool:
        now = now or self._clock()
        with self._lock:
            if self._actions < self._configuration.actions_before_show:
                return False
            if self._last_shown_at is None:
                return True
            elapsed = (now - self._last_shown_at).total_seconds()
            return elapsed >= self._configuration.cooldown_seconds

    def record_action(self) -> None:
        with self._lock:
            self._actions += 1

    def record_ad_shown(self, now: Optional[datetime] = None) -> None:
        with self._lock:
            self._last_shown_at = now or self._clock()
            self._actions = 0

    def reset(self) -> None:
        with self._lock:
            self._last_shown_at = None
            self._actions = 0


__all__ = [
    "CooldownConfiguration",
    "InterstitialCooldown",
    "WEEK_SWITCH_ACTIONS_BEFORE_SHOW",
    "WEEK_SWITCH_COOLDOWN_SECONDS",
]
