"""Timer that downgrades temporary premium when it expires."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable, Optional

from core.time_utils import utc_now


class PremiumExpirationMonitor:
    """Fire ``on_expiration`` once at the scheduled instant.

    Scheduling again replaces the previous timer. An instant already in the
    past fires synchronously.
    """

    def __init__(self, on_expiration: Callable[[], None], *, clock: Callable[[], datetime] = utc_now) -> None:
        self._on_expiration = on_expiration
        self._clock = clock
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    @property
    def scheduled(self) -> bool:
        with self._lock:
            return self._timer is not None

    def schedule(self, expires_at: datetime) -> None:
        self.cancel()
        delay = (expires_at - self._clock()).total_seconds()
        if delay <= 0:
            self._on_expiration()
            return
        timer = threading.Timer(delay, self._fire)
        timer.daemon = True
        with self._lock:
            self._timer = timer
        timer.start()

    def cancel(self) -> None:
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def _fire(self) -> None:
        with self._lock:
            self._timer = None
        self._on_expiration()


__all__ = ["PremiumExpirationMonitor"]
