"""
Request-scoped unit of work.

Owns the identity map, the sync dirty-set, the clock and the blob storage
handle used by the domain layer while a single request is handled. Leaving
the unit of work (normally or through an exception) flushes the dirty-set
exactly once.
"""

import datetime
import logging
from contextlib import contextmanager
from typing import Callable, Dict, Generator, List, Optional, Type, TypeVar

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursesite_backend.client.push_client import get_notification_sink
from coursesite_backend.database import get_db
from coursesite_backend.object_cache import ObjectCache
from coursesite_backend.repositories.base import RepositoryError
from coursesite_backend.services.storage_service import get_storage_service
from coursesite_backend.sync import NotificationSink, NullNotificationSink, Sync

logger = logging.getLogger(__name__)

R = TypeVar('R')


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class UnitOfWork:

    def __init__(
        self,
        db: Session,
        sink: Optional[NotificationSink] = None,
        clock: Optional[Callable[[], datetime.datetime]] = None,
        storage=None
    ):
        self.db = db
        self.cache = ObjectCache()
        self.sync = Sync(sink or NullNotificationSink())
        self._clock = clock or utcnow
        self._storage = storage
        self._repositories: Dict[type, object] = {}
        self._after_commit: List[Callable[[], None]] = []
        self._closed = False

    def now(self) -> datetime.datetime:
        return self._clock()

    @property
    def storage(self):
        if self._storage is None:
            self._storage = get_storage_service()
        return self._storage

    def repository(self, repository_class: Type[R]) -> R:
        repository = self._repositories.get(repository_class)
        if repository is None:
            repository = repository_class(self.db)
            self._repositories[repository_class] = repository
        return repository

    def mark_dirty(self, course) -> None:
        self.sync.mark_dirty(course)

    def after_commit(self, callback: Callable[[], None]) -> None:
        """
        Run callback once the outermost transaction has committed.

        Outside a transaction the callback runs right away. A rolled back
        transaction drops its callbacks. Failures are logged and never raised.
        """
        if self.db.info.get("atomic"):
            self._after_commit.append(callback)
        else:
            self._run_callbacks([callback])

    def _run_callbacks(self, callbacks: List[Callable[[], None]]) -> None:
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Post-commit cleanup failed")

    @contextmanager
    def transaction(self):
        """
        Run several repository writes as one atomic step.

        Repository writes inside the block only flush; the block commits once
        at the end or rolls everything back on the first failure.
        """
        if self.db.info.get("atomic"):
            yield
            return

        self.db.info["atomic"] = True
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as e:
            self._after_commit.clear()
            self.db.rollback()
            raise RepositoryError(f"Transaction failed: {str(e)}") from e
        except Exception:
            self._after_commit.clear()
            self.db.rollback()
            raise
        finally:
            self.db.info.pop("atomic", None)

        callbacks, self._after_commit = self._after_commit, []
        self._run_callbacks(callbacks)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.sync.flush()

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb):
        try:
            if exc_type is not None:
                self.db.rollback()
        finally:
            self.close()
        return False


def get_unit_of_work(
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink)
) -> Generator[UnitOfWork, None, None]:

    with UnitOfWork(db, sink) as uow:
        yield uow
