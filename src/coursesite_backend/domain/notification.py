"""
Per-user notifications, plus the push to the user's connected browsers
that announces a new one.
"""

import datetime
import logging
from typing import List, Optional

from coursesite_backend.api.exceptions import BadRequestException
from coursesite_backend.domain.base import DomainObject
from coursesite_backend.domain.user import User
from coursesite_backend.interface.notifications import NotificationContext
from coursesite_backend.object_cache import CacheKind
from coursesite_backend.repositories import NotificationRepository
from coursesite_backend.settings import settings

logger = logging.getLogger(__name__)


class Notification(DomainObject):

    kind = CacheKind.notification
    repository_class = NotificationRepository

    @classmethod
    def create(cls, uow, user: User, message: str, link: str = "", image_url: str = "") -> "Notification":
        if user.is_guest:
            raise BadRequestException("Notifications cannot be created for guests.")
        message = (message or "").strip()
        if not message:
            raise BadRequestException("Notification message cannot be empty.")

        row = uow.repository(NotificationRepository).insert(
            user_id=user.id,
            created_at=uow.now(),
            message=message,
            link=link or "",
            image_url=image_url or "",
        )
        return cls.from_id(uow, row.id)

    @classmethod
    def for_user(cls, uow, user: User) -> List["Notification"]:
        """The newest notifications of a user, capped at the configured limit."""
        if user.is_guest:
            return []
        rows = uow.repository(NotificationRepository).find_latest(user.id, settings.NOTIFICATION_LIMIT)
        return [cls.from_row(uow, row) for row in rows]

    @classmethod
    def mark_all_read(cls, uow, user: User) -> None:
        if user.is_guest:
            return
        uow.repository(NotificationRepository).mark_all_read(user.id, uow.now())

    @classmethod
    def purge(cls, uow) -> int:
        """Delete notifications older than the retention window, read or not."""
        cutoff = uow.now() - datetime.timedelta(days=settings.NOTIFICATION_EXPIRE_DAYS)
        count = uow.repository(NotificationRepository).delete_older_than(cutoff)
        logger.info(f"Purged {count} notification(s) created before {cutoff.isoformat()}")
        return count

    @property
    def user_id(self) -> int:
        return self.row.user_id

    @property
    def has_read(self) -> bool:
        return self.row.read_at is not None

    def get_context(self, user: Optional[User] = None) -> NotificationContext:
        return NotificationContext(
            notification_id=self.id,
            created_at=self.row.created_at,
            has_read=self.has_read,
            message=self.row.message,
            link=self.row.link,
            image_url=self.row.image_url,
        )


def notify(uow, user: User, message: str, link: str = "", image_url: str = "", push_server=None) -> Notification:
    """Store a notification for user and tell their open sessions about it."""
    notification = Notification.create(uow, user, message, link, image_url)
    if push_server is not None:
        try:
            push_server.emit(user.id, "notification")
        except Exception:
            logger.exception(f"Could not push notification {notification.id} to user {user.id}")
    return notification
