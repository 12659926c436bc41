"""
Notification repository.
"""

import datetime
from typing import List
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .base import BaseRepository, RepositoryError
from ..model.notification import Notification


class NotificationRepository(BaseRepository[Notification]):
    """Repository for per-user notifications."""
    
    def __init__(self, db: Session):
        super().__init__(db, Notification)
    
    def find_latest(self, user_id: int, limit: int) -> List[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )
    
    def mark_all_read(self, user_id: int, read_at: datetime.datetime) -> None:
        try:
            self.db.execute(
                update(Notification)
                .where(Notification.user_id == user_id, Notification.read_at.is_(None))
                .values(read_at=read_at)
                .execution_options(synchronize_session="evaluate")
            )
            self._commit()
        except SQLAlchemyError as e:
            self._rollback()
            raise RepositoryError(f"Failed to update {self.model.__name__}: {str(e)}") from e
    
    def delete_older_than(self, cutoff: datetime.datetime) -> int:
        try:
            count = (
                self.db.query(Notification)
                .filter(Notification.created_at < cutoff)
                .delete(synchronize_session="evaluate")
            )
            self._commit()
            return count
        except SQLAlchemyError as e:
            self._rollback()
            raise RepositoryError(f"Failed to delete {self.model.__name__}: {str(e)}") from e
