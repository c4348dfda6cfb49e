# src/cts_harness/registry/universe.py
"""FunctionUniverse: the authoritative set of tags a run must cover."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import Any

import structlog

from cts_harness.contracts import FunctionTag

logger = structlog.get_logger(__name__)


class FunctionUniverse:
    """Ordered set of FunctionTags.

    Duplicate tags collapse; the first occurrence fixes the position, which
    is also the order uncovered tags are reported in.

    set_universe() replaces the whole set atomically. There is no snapshot
    isolation: a report computed after a mid-run replacement reflects the
    new universe.
    """

    def __init__(self, lock: threading.Lock | None = None) -> None:
        self._lock = lock if lock is not None else threading.Lock()
        self._tags: dict[FunctionTag, None] = {}

    def set_universe(self, tags: Iterable[Any]) -> None:
        """Replace the universe.

        Args:
            tags: FunctionTags, ``(id, version)`` pairs or ``"id:version"`` strings

        Raises:
            TypeError / ValueError: If an element cannot be read as a tag.
                The current universe is left untouched in that case.
        """
        ordered = dict.fromkeys(FunctionTag.coerce(tag) for tag in tags)
        with self._lock:
            replaced = len(self._tags)
            self._tags = ordered
        logger.debug("Function universe set", size=len(ordered), replaced=replaced)

    def tags(self) -> tuple[FunctionTag, ...]:
        with self._lock:
            return tuple(self._tags)

    def _tags_unlocked(self) -> tuple[FunctionTag, ...]:
        # Caller must already hold the shared lock.
        return tuple(self._tags)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tags)

    def __contains__(self, tag: object) -> bool:
        with self._lock:
            return tag in self._tags
