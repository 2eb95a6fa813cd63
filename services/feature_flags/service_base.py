"""Shared lifecycle for the flag and parameter services.

Each service hydrates from storage on a single background worker, publishes
full resolved snapshots after every change, and persists in invocation order
on that same worker. Reads never wait on I/O.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Generic, List, Optional, Tuple, TypeVar

from core.time_utils import utc_now
from services.feature_flags.broadcast import Observer, SnapshotBroadcaster
from services.feature_flags.errors import NetworkFailure
from services.feature_flags.storage import StateStore

K = TypeVar("K")
V = TypeVar("V")
S = TypeVar("S")

Clock = Callable[[], datetime]

DEFAULT_SYNC_INTERVAL = timedelta(hours=1)
DEFAULT_HYDRATION_TIMEOUT_SECONDS = 5.0


class ServicePhase(str, Enum):
    UNINITIALIZED = "uninitialized"
    HYDRATING = "hydrating"
    READY = "ready"


@dataclass(frozen=True, slots=True)
class SyncPolicy:
    """Decides whether hydrated state is stale enough to refresh."""

    interval: timedelta = DEFAULT_SYNC_INTERVAL

    def should_sync(self, last_sync: Optional[datetime], *, now: datetime) -> bool:
        if last_sync is None:
            return True
        return now - last_sync > self.interval


class ResolvedStateService(ABC, Generic[K, V, S]):
    label = "state"

    def __init__(
        self,
        *,
        storage: StateStore[S],
        sync_policy: Optional[SyncPolicy] = None,
        clock: Optional[Clock] = None,
        auto_sync: bool = True,
        hydration_timeout: float = DEFAULT_HYDRATION_TIMEOUT_SECONDS,
    ) -> None:
        self._logger = logging.getLogger(f"{type(self).__module__}.{type(self).__name__}")
        self._storage = storage
        self._sync_policy = sync_policy or SyncPolicy()
        self._clock = clock or utc_now
        self._auto_sync = auto_sync
        self._hydration_timeout = hydration_timeout
        self._lock = threading.RLock()
        self._ready = threading.Event()
        self._state: S = self._empty_state()
        # Changes applied before hydration finished; replayed onto the loaded state.
        self._pending: List[Callable[[S], None]] = []
        self._phase = ServicePhase.UNINITIALIZED
        self._broadcaster: SnapshotBroadcaster[Dict[K, V]] = SnapshotBroadcaster(name=self.label, copy=dict)
        self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"{self.label}-worker")

        self._phase = ServicePhase.HYDRATING
        self._worker.submit(self._hydrate)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _empty_state(self) -> S:
        ...

    @abstractmethod
    def _resolve_all(self, state: S) -> Dict[K, V]:
        ...

    @abstractmethod
    def _fetch_remote(self) -> Any:
        ...

    @abstractmethod
    def _apply_remote(self, state: S, snapshot: Any, synced_at: datetime) -> None:
        ...

    @abstractmethod
    def _last_sync(self, state: S) -> Optional[datetime]:
        ...

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def phase(self) -> ServicePhase:
        with self._lock:
            return self._phase

    @property
    def last_sync(self) -> Optional[datetime]:
        with self._lock:
            return self._last_sync(self._state)

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._ready.wait(timeout)

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until queued hydration, background sync and saves have run."""
        self._worker.submit(lambda: None).result(timeout)

    def close(self) -> None:
        self._worker.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _hydrate(self) -> None:
        try:
            loaded = self._storage.load_state()
        except Exception:  # noqa: BLE001 - hydration falls back to empty state
            self._logger.exception("Loading persisted %s failed; starting empty", self.label)
            loaded = self._empty_state()

        with self._lock:
            pending, self._pending = self._pending, []
            for change in pending:
                change(loaded)
            self._state = loaded
            self._phase = ServicePhase.READY
            self._ready.set()
            self._publish_locked()
            if pending:
                self._persist_locked()
            last_sync = self._last_sync(loaded)
        self._logger.debug("Hydrated %s (last sync: %s, %d early changes)", self.label, last_sync, len(pending))

        if not self._auto_sync:
            return
        if not self._sync_policy.should_sync(last_sync, now=self._clock()):
            self._logger.debug("Skipping %s sync; last sync %s is fresh", self.label, last_sync)
            return
        try:
            self.sync_from_remote()
        except NetworkFailure as exc:
            self._logger.warning("Background %s sync failed: %s", self.label, exc)

    def _await_ready(self) -> None:
        if self._ready.is_set():
            return
        if not self._ready.wait(self._hydration_timeout):
            self._logger.warning(
                "%s still hydrating after %.1fs; change will be replayed onto the loaded state",
                self.label,
                self._hydration_timeout,
            )

    # ------------------------------------------------------------------
    # Snapshot + mutation plumbing
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[K, V]:
        with self._lock:
            return self._resolve_all(self._state)

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register ``observer`` for full snapshots; returns an unsubscribe callable."""
        with self._lock:
            return self._broadcaster.subscribe(observer)

    def sync_from_remote(self) -> None:
        """Fetch remote values and replace the remote part of the state.

        Raises :class:`NetworkFailure` and leaves state untouched when the
        fetch fails.
        """
        self._await_ready()
        self._logger.info("Syncing %s from remote", self.label)
        snapshot = self._fetch_remote()
        synced_at = self._clock()
        self._apply(lambda state: self._apply_remote(state, snapshot, synced_at))
        self._logger.info("Synced %s at %s", self.label, synced_at.isoformat())

    def snapshot_with_overrides(self) -> Tuple[Dict[K, V], FrozenSet[str]]:
        """Resolved snapshot plus the keys holding a local override, read together."""
        with self._lock:
            return self._resolve_all(self._state), frozenset(self._state.local_overrides)  # type: ignore[attr-defined]

    def _mutate(self, change: Callable[[S], None]) -> None:
        self._await_ready()
        self._apply(change)

    def _apply(self, change: Callable[[S], None]) -> None:
        with self._lock:
            change(self._state)
            self._publish_locked()
            if not self._ready.is_set():
                # Hydration persists the merged state once it completes.
                self._pending.append(change)
                return
            self._persist_locked()

    def _publish_locked(self) -> None:
        self._broadcaster.publish(self._resolve_all(self._state))

    def _persist_locked(self) -> None:
        state_copy = self._state.copy()  # type: ignore[attr-defined]
        try:
            self._worker.submit(self._storage.save_state, state_copy)
        except RuntimeError as exc:
            self._logger.warning("Dropping %s save after shutdown: %s", self.label, exc)


__all__ = [
    "Clock",
    "DEFAULT_HYDRATION_TIMEOUT_SECONDS",
    "DEFAULT_SYNC_INTERVAL",
    "ResolvedStateService",
    "ServicePhase",
    "SyncPolicy",
    "utc_now",
]
