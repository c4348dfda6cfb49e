# src/cts_harness/registry/results.py
"""Keyed string store for handing values from a test body to its post-check.

Thread Safety:
    Every get/set takes the owning context's lock for exactly one dict
    operation. A set followed by a get is NOT atomic as a pair.

Lifetime:
    Entries live as long as the owning HarnessContext. Nothing is purged
    between tests, so two tests writing the same key see each other's
    values; use test-specific keys when that matters.
"""

from __future__ import annotations

import threading


class ResultStore:
    """Process-scoped ``str -> str`` mapping, last write wins."""

    def __init__(self, lock: threading.Lock | None = None) -> None:
        self._lock = lock if lock is not None else threading.Lock()
        self._values: dict[str, str] = {}

    def set(self, key: str, value: object) -> None:
        """Store ``str(value)`` under ``key``, replacing any previous value."""
        text = value if isinstance(value, str) else str(value)
        with self._lock:
            self._values[key] = text

    def get(self, key: str) -> str:
        """Return the stored value, or ``""`` if the key was never set."""
        with self._lock:
            return self._values.get(key, "")

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._values

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._values)
