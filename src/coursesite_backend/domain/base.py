"""
Shared behaviour of the domain objects.

Every domain object wraps one ORM row and belongs to exactly one unit of
work. Instances are handed out through the unit of work's identity map, so
two lookups of the same row inside a request yield the same object.
"""

from typing import Any, ClassVar, Optional, Type

from coursesite_backend.api.exceptions import NotFoundException
from coursesite_backend.object_cache import CacheKind
from coursesite_backend.repositories.base import BaseRepository


class DomainObject:

    kind: ClassVar[CacheKind]
    repository_class: ClassVar[Type[BaseRepository]]

    def __init__(self, uow, row: Any):
        self.uow = uow
        self.row = row

    @property
    def id(self) -> int:
        return self.row.id

    @classmethod
    def from_row(cls, uow, row: Any):
        instance = uow.cache.get(cls.kind, row.id)
        if instance is None:
            instance = cls(uow, row)
            uow.cache.set(cls.kind, row.id, instance)
        return instance

    @classmethod
    def from_id(cls, uow, id: int):
        instance = uow.cache.get(cls.kind, id)
        if instance is not None:
            return instance

        row = uow.repository(cls.repository_class).get_by_id_optional(id)
        if row is None:
            raise NotFoundException(f"{cls.__name__} {id} does not exist.")
        return cls.from_row(uow, row)

    @classmethod
    def find(cls, uow, id: Optional[int]):
        """Like from_id but returns None for unknown ids."""
        if not id:
            return None
        try:
            return cls.from_id(uow, id)
        except NotFoundException:
            return None

    @property
    def repository(self):
        return self.uow.repository(self.repository_class)

    def _update(self, **values) -> bool:
        """
        Persist the fields whose value differs from the current one.

        Returns False without touching the database when nothing changed.
        """
        changed = {key: value for key, value in values.items() if getattr(self.row, key) != value}
        if not changed:
            return False
        self.repository.update(self.row, **changed)
        return True

    def _forget(self) -> None:
        self.uow.cache.invalidate(self.kind, self.id)

    def __eq__(self, other):
        if not isinstance(other, DomainObject):
            return NotImplemented
        return type(self) is type(other) and self.id == other.id

    def __hash__(self):
        return hash((self.kind, self.id))

    def __repr__(self):
        return f"<{type(self).__name__} {self.id}>"
