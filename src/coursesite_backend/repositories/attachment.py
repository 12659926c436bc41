"""
Attachment repository for direct database access.
"""

from sqlalchemy.orm import Session

from .base import BaseRepository
from ..model.attachment import Attachment


class AttachmentRepository(BaseRepository[Attachment]):
    
    def __init__(self, db: Session):
        super().__init__(db, Attachment)
