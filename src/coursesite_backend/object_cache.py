"""
Identity map for domain objects.

One ObjectCache lives inside each unit of work, so a persisted row is
represented by at most one in-memory instance while a request is handled
and nothing leaks into the next request.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class CacheKind(str, Enum):
    user = "user"
    course = "course"
    entry = "entry"
    question = "question"
    answer = "answer"
    attachment = "attachment"
    notification = "notification"


class _Absent:
    """Marker stored in a slot whose row was deleted."""

    def __repr__(self):
        return "<absent>"


ABSENT = _Absent()


class ObjectCache:

    def __init__(self):
        self._slots: Dict[Tuple[CacheKind, int], Any] = {}

    def set(self, kind: CacheKind, id: int, instance: Any) -> None:
        self._slots[(kind, id)] = instance

    def get(self, kind: CacheKind, id: int) -> Optional[Any]:
        """Return the cached instance, or None on a miss (never seen or invalidated)."""
        instance = self._slots.get((kind, id), ABSENT)
        if instance is ABSENT:
            return None
        logger.debug(f"Cache hit for {kind.value}:{id}")
        return instance

    def invalidate(self, kind: CacheKind, id: int) -> None:
        self._slots[(kind, id)] = ABSENT

    def is_invalidated(self, kind: CacheKind, id: int) -> bool:
        return self._slots.get((kind, id)) is ABSENT

    def __contains__(self, key: Tuple[CacheKind, int]) -> bool:
        return self._slots.get(key, ABSENT) is not ABSENT

    def clear(self) -> None:
        self._slots.clear()
