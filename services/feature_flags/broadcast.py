"""Current-value broadcast of snapshots to observers."""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Callable, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Observer = Callable[[T], None]


def _identity(value: T) -> T:
    return value


class SnapshotBroadcaster(Generic[T]):
    """Deliver whole snapshots to observers.

    Late subscribers receive the latest snapshot immediately. Nothing is
    delivered before the first publish. ``copy`` gives each observer its own
    copy of mutable snapshots.
    """

    def __init__(self, *, name: str, copy: Callable[[T], T] = _identity) -> None:
        self._name = name
        self._copy = copy
        self._lock = threading.Lock()
        self._observers: Dict[int, Observer] = {}
        self._ids = itertools.count(1)
        self._current: Optional[T] = None

    @property
    def current(self) -> Optional[T]:
        with self._lock:
            return self._copy(self._current) if self._current is not None else None

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        with self._lock:
            token = next(self._ids)
            self._observers[token] = observer
            current = self._current

        if current is not None:
            self._deliver(observer, current)

        def _unsubscribe() -> None:
            with self._lock:
                self._observers.pop(token, None)

        return _unsubscribe

    def publish(self, snapshot: T) -> None:
        with self._lock:
            self._current = snapshot
            observers = list(self._observers.values())
        for observer in observers:
            self._deliver(observer, snapshot)

    def _deliver(self, observer: Observer, snapshot: T) -> None:
        try:
            observer(self._copy(snapshot))
        except Exception:  # noqa: BLE001 - observer errors are logged only
            logger.exception("%s observer raised while handling a snapshot", self._name)


__all__ = ["Observer", "SnapshotBroadcaster"]
