"""
Process-local counters.

Counter names follow a dotted convention, e.g.
``human_verification.recaptcha.success``. Increments are lock-protected so
concurrent requests (threadpool or event loop) never lose updates.
"""

from __future__ import annotations

import threading
from collections import Counter


class CounterRegistry:
    def __init__(self) -> None:
        self._counts: Counter[str] = Counter()
        self._lock = threading.Lock()

    def increment(self, name: str, amount: int = 1) -> None:
        with self._lock:
            self._counts[name] += amount

    def get(self, name: str) -> int:
        with self._lock:
            return self._counts[name]

    def snapshot(self) -> dict[str, int]:
        """Return a copy of all counters, safe to serialise."""
        with self._lock:
            return dict(self._counts)

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
