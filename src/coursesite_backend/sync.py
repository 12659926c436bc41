"""
Course change notification.

Writes mark their owning course dirty; at the end of the unit of work every
dirty course is flushed once, with a context computed separately for each
recipient and handed to the notification sink.
"""

import logging
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):

    def emit(self, user: Any, kind: str, id: int, context: Optional[dict]) -> None:
        ...


class NullNotificationSink:
    """Sink used when no push relay is configured."""

    def emit(self, user: Any, kind: str, id: int, context: Optional[dict]) -> None:
        logger.debug(f"Dropping {kind}:{id} sync for user {user.id} (push disabled)")


class Sync:

    def __init__(self, sink: NotificationSink):
        self.sink = sink
        self._dirty: Dict[int, Any] = {}

    def mark_dirty(self, course) -> None:
        # keyed by id; repeated marks collapse
        self._dirty[course.id] = course

    def is_dirty(self, course_id: int) -> bool:
        return course_id in self._dirty

    @property
    def dirty_ids(self) -> list:
        return list(self._dirty.keys())

    def flush(self) -> int:
        """
        Emit the current context of every dirty course to each of its recipients.

        Delivery is best effort: a failing recipient or course is logged and
        skipped, the rest still receive their payload. Returns the number of
        payloads handed to the sink.
        """
        dirty, self._dirty = self._dirty, {}
        emitted = 0

        for course_id, course in dirty.items():
            try:
                recipients = course.sync_recipients()
            except Exception:
                logger.exception(f"Could not resolve sync recipients for course {course_id}")
                continue

            logger.debug(f"Flushing course {course_id} to {len(recipients)} recipient(s)")

            for user in recipients:
                try:
                    context = course.get_context(user) if not course.is_deleted else None
                    payload = context.model_dump(mode="json") if context is not None else None
                    self.sink.emit(user, "course", course_id, payload)
                    emitted += 1
                except Exception:
                    logger.exception(f"Sync of course {course_id} to user {user.id} failed")

        return emitted
