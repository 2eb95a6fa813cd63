"""Feature flag service: overrides, remote sync and resolved snapshots."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Protocol, Union

from services.feature_flags.broadcast import Observer
from services.feature_flags.registry import FeatureFlag, parse_flag
from services.feature_flags.remote import FlagsRemoteSource, FlagsSnapshot
from services.feature_flags.resolver import resolve_all_flags, resolve_flag
from services.feature_flags.service_base import Clock, ResolvedStateService, SyncPolicy
from services.feature_flags.state import FlagState
from services.feature_flags.storage import StateStore

FlagKey = Union[FeatureFlag, str]


class FeatureFlagService(Protocol):
    def is_enabled(self, flag: FlagKey) -> bool:
        ...

    def set_enabled(self, flag: FlagKey, enabled: bool) -> None:
        ...

    def reset(self, flag: FlagKey) -> None:
        ...

    def reset_all(self) -> None:
        ...

    def sync_from_remote(self) -> None:
        ...

    def has_local_override(self, flag: FlagKey) -> bool:
        ...

    def snapshot(self) -> Dict[FeatureFlag, bool]:
        ...

    def subscribe(self, observer: Observer):
        ...


class DefaultFeatureFlagService(ResolvedStateService[FeatureFlag, bool, FlagState]):
    """Resolves flags as local override > remote value > registry default."""

    label = "feature_flags"

    def __init__(
        self,
        *,
        storage: StateStore[FlagState],
        remote: FlagsRemoteSource,
        sync_policy: Optional[SyncPolicy] = None,
        clock: Optional[Clock] = None,
        auto_sync: bool = True,
        hydration_timeout: float = 5.0,
        debug: bool = False,
    ) -> None:
        self._remote = remote
        self._debug = debug
        super().__init__(
            storage=storage,
            sync_policy=sync_policy,
            clock=clock,
            auto_sync=auto_sync,
            hydration_timeout=hydration_timeout,
        )

    def _empty_state(self) -> FlagState:
        return FlagState.empty()

    def _resolve_all(self, state: FlagState) -> Dict[FeatureFlag, bool]:
        return resolve_all_flags(state.local_overrides, state.remote_flags, debug=self._debug)

    def _fetch_remote(self) -> FlagsSnapshot:
        return self._remote.fetch_flags()

    def _apply_remote(self, state: FlagState, snapshot: FlagsSnapshot, synced_at: datetime) -> None:
        state.remote_flags = dict(snapshot.values)
        state.version = snapshot.version
        state.last_sync = synced_at
        self._logger.info("Received %d remote flags (version %s)", len(snapshot.values), snapshot.version)

    def _last_sync(self, state: FlagState) -> Optional[datetime]:
        return state.last_sync

    @property
    def debug(self) -> bool:
        """Whether registered defaults follow a debug build."""
        return self._debug

    @property
    def version(self) -> Optional[str]:
        with self._lock:
            return self._state.version

    def is_enabled(self, flag: FlagKey) -> bool:
        flag = parse_flag(flag)
        with self._lock:
            return resolve_flag(
                flag,
                local_overrides=self._state.local_overrides,
                remote_flags=self._state.remote_flags,
                debug=self._debug,
            )

    def set_enabled(self, flag: FlagKey, enabled: bool) -> None:
        flag = parse_flag(flag)
        value = bool(enabled)

        def _apply(state: FlagState) -> None:
            state.local_overrides[flag.value] = value

        self._mutate(_apply)

    def reset(self, flag: FlagKey) -> None:
        flag = parse_flag(flag)
        self._mutate(lambda state: state.local_overrides.pop(flag.value, None))

    def reset_all(self) -> None:
        self._mutate(lambda state: state.local_overrides.clear())

    def has_local_override(self, flag: FlagKey) -> bool:
        flag = parse_flag(flag)
        with self._lock:
            return flag.value in self._state.local_overrides


__all__ = ["DefaultFeatureFlagService", "FeatureFlagService", "FlagKey"]
