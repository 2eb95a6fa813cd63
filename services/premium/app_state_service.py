"""Owner of the persisted premium status and rewarded-ad counters."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol

from core.premium_constants import DEFAULT_TEMPORARY_PREMIUM_SECONDS, PremiumTier
from core.time_utils import utc_now
from services.feature_flags.broadcast import Observer, SnapshotBroadcaster
from services.feature_flags.parameter_service import ParameterService
from services.feature_flags.registry import ParameterKey
from services.feature_flags.storage import StateStore
from services.premium.access import PremiumAccess, PremiumStatus, evaluate_premium_access
from services.premium.app_state import AppState
from services.premium.expiration import PremiumExpirationMonitor

logger = logging.getLogger(__name__)


class AppStateService(Protocol):
    @property
    def state(self) -> AppState:
        ...

    @property
    def premium_status(self) -> PremiumStatus:
        ...

    @property
    def is_premium(self) -> bool:
        ...

    def premium_access(self, now: Optional[datetime] = None) -> PremiumAccess:
        ...

    def grant_premium(self) -> None:
        ...

    def grant_temporary_premium(self, duration: Optional[timedelta] = None) -> None:
        ...

    def revoke_premium(self) -> None:
        ...

    def record_ad_watched(self) -> None:
        ...

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        ...


class DefaultAppStateService:
    """Load, mutate and persist :class:`AppState`.

    Expired temporary premium is downgraded to free on load, and an
    expiration monitor downgrades it while the process is running.
    """

    def __init__(
        self,
        *,
        storage: StateStore[AppState],
        parameters: Optional[ParameterService] = None,
        clock: Optional[Callable[[], datetime]] = None,
        default_temporary_duration: timedelta = timedelta(seconds=DEFAULT_TEMPORARY_PREMIUM_SECONDS),
    ) -> None:
        self._storage = storage
        self._parameters = parameters
        self._clock = clock or utc_now
        self._default_temporary_duration = default_temporary_duration
        self._lock = threading.RLock()
        self._broadcaster: SnapshotBroadcaster[AppState] = SnapshotBroadcaster(name="app_state")
        self._monitor = PremiumExpirationMonitor(self._handle_expiration, clock=self._clock)

        loaded = storage.load_state()
        if loaded.premium_status.is_expired(now=self._clock()):
            logger.info("Temporary premium expired while the app was closed; downgrading to free")
            self._set_state(replace(loaded, premium_status=PremiumStatus.free()))
        else:
            self._set_state(loaded, persist=False)

    @property
    def state(self) -> AppState:
        with self._lock:
            return self._state

    @property
    def premium_status(self) -> PremiumStatus:
        return self.state.premium_status

    def premium_access(self, now: Optional[datetime] = None) -> PremiumAccess:
        return evaluate_premium_access(self.premium_status, now=now or self._clock())

    @property
    def is_premium(self) -> bool:
        return self.premium_access().is_premium

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        with self._lock:
            return self._broadcaster.subscribe(observer)

    def grant_premium(self) -> None:
        with self._lock:
            self._set_state(
                replace(self._state, premium_status=PremiumStatus.permanent(), premium_purchase_date=self._clock())
            )
        logger.info("Granted permanent premium")

    def grant_temporary_premium(self, duration: Optional[timedelta] = None) -> None:
        duration = duration if duration is not None else self._temporary_duration()
        with self._lock:
            if self._state.premium_status.tier is PremiumTier.PERMANENT:
                logger.info("Ignoring temporary premium grant; permanent premium already active")
                return
            expires_at = self._clock() + duration
            self._set_state(replace(self._state, premium_status=PremiumStatus.temporary(expires_at)))
        logger.info("Granted temporary premium until %s", expires_at.isoformat())

    def revoke_premium(self) -> None:
        with self._lock:
            self._set_state(replace(self._state, premium_status=PremiumStatus.free(), premium_purchase_date=None))
        logger.info("Revoked premium")

    def record_ad_watched(self) -> None:
        with self._lock:
            self._set_state(
                replace(
                    self._state,
                    last_ad_watched_at=self._clock(),
                    total_ads_watched=self._state.total_ads_watched + 1,
                )
            )

    def close(self) -> None:
        self._monitor.cancel()

    def _temporary_duration(self) -> timedelta:
        if self._parameters is not None:
            seconds = self._parameters.resolve(ParameterKey.PREMIUM_TRIAL_DURATION).seconds
            if seconds is not None and seconds > 0:
                return timedelta(seconds=seconds)
        return self._default_temporary_duration

    def _handle_expiration(self) -> None:
        with self._lock:
            if not self._state.premium_status.is_expired(now=self._clock()):
                return
            logger.info("Temporary premium expired; downgrading to free")
            self._set_state(replace(self._state, premium_status=PremiumStatus.free()))

    def _set_state(self, state: AppState, *, persist: bool = True) -> None:
        with self._lock:
            self._state = state
            self._broadcaster.publish(state)
            if persist:
                self._storage.save_state(state)
            # Last step: scheduling may fire synchronously and re-enter.
            if state.premium_status.tier is PremiumTier.TEMPORARY:
                self._monitor.schedule(state.premium_status.expires_at)  # type: ignore[arg-type]
            else:
                self._monitor.cancel()


__all__ = ["AppStateService", "DefaultAppStateService"]
