"""
Attachments: opaque blobs addressed by id, stored in object storage.
"""

import logging
from typing import Optional

from coursesite_backend.domain.base import DomainObject
from coursesite_backend.interface.attachments import AttachmentContext
from coursesite_backend.object_cache import CacheKind
from coursesite_backend.repositories import AttachmentRepository
from coursesite_backend.storage_config import ATTACHMENT_KEY_PATTERN
from coursesite_backend.storage_security import detect_image_type, validate_attachment

logger = logging.getLogger(__name__)


class Attachment(DomainObject):

    kind = CacheKind.attachment
    repository_class = AttachmentRepository

    @classmethod
    def create(cls, uow, owner, data: bytes, name: str) -> "Attachment":
        name = validate_attachment(data, name)

        repository = uow.repository(AttachmentRepository)
        row = repository.insert(
            created_by=owner.id or None,
            created_at=uow.now(),
            name=name,
            size=len(data),
        )

        try:
            uow.storage.put_bytes(cls.storage_key_for(row.id), data, detect_image_type(data))
        except Exception:
            repository.delete(row)
            raise

        logger.info(f"Attachment {row.id} '{name}' ({len(data)} bytes) stored for user {owner.id}")
        return cls.from_id(uow, row.id)

    @staticmethod
    def storage_key_for(attachment_id: int) -> str:
        return ATTACHMENT_KEY_PATTERN.format(attachment_id=attachment_id)

    @property
    def storage_key(self) -> str:
        return self.storage_key_for(self.id)

    @property
    def name(self) -> str:
        return self.row.name

    @property
    def size(self) -> int:
        return self.row.size

    @property
    def owner_id(self) -> Optional[int]:
        return self.row.created_by

    def read_bytes(self) -> bytes:
        return self.uow.storage.get_bytes(self.storage_key)

    def delete(self) -> None:
        attachment_id = self.id
        self.repository.delete(self.row)
        self._forget()
        key = self.storage_key_for(attachment_id)
        self.uow.after_commit(lambda: self.uow.storage.remove(key))
        logger.info(f"Attachment {attachment_id} deleted")

    def get_context(self, user=None) -> AttachmentContext:
        return AttachmentContext(
            attachment_id=self.id,
            created_by=self.owner_id,
            created_at=self.row.created_at,
            size=self.size,
            name=self.name,
        )
