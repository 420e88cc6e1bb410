# src/taskbell/core/disabled.py

from __future__ import annotations

import threading
from datetime import datetime, timedelta


class DisabledState:
    """
    Snooze window ("disable for N minutes").

    While disabled, the poller keeps updating the status but no reminders are sent.
    """

    def __init__(self) -> None:
        self._disabled_until: datetime | None = None
        self._lock = threading.Lock()

    def update(self, now: datetime) -> None:
        with self._lock:
            if self._disabled_until is not None and self._disabled_until < now:
                self._disabled_until = None

    def disable_for_minutes(self, minutes: int, now: datetime) -> datetime:
        if minutes <= 0:
            raise ValueError(f"minutes must be positive, got {minutes}")
        until = now + timedelta(minutes=minutes)
        with self._lock:
            self._disabled_until = until
        return until

    def enable_app(self) -> None:
        with self._lock:
            self._disabled_until = None

    def is_app_disabled(self) -> bool:
        with self._lock:
            return self._disabled_until is not None

    def disabled_until(self) -> datetime | None:
        with self._lock:
            return self._disabled_until
