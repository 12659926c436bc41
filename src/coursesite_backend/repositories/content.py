"""
Repositories for the entry / question / answer content tree.

Each repository exposes the ordered lookup by parent id that the domain
layer relies on.
"""

from typing import List
from sqlalchemy.orm import Session

from .base import BaseRepository
from ..model.attachment import Attachment
from ..model.course import Answer, AnswerLike, Entry, EntryAttachment, Question


class EntryRepository(BaseRepository[Entry]):
    
    def __init__(self, db: Session):
        super().__init__(db, Entry)
    
    def find_by_course(self, course_id: int) -> List[Entry]:
        return self.list_by(order_by=[Entry.display_at, Entry.id], course_id=course_id)


class EntryAttachmentRepository(BaseRepository[EntryAttachment]):
    
    def __init__(self, db: Session):
        super().__init__(db, EntryAttachment)
    
    def find_attachments(self, entry_id: int) -> List[Attachment]:
        return (
            self.db.query(Attachment)
            .join(EntryAttachment, EntryAttachment.attachment_id == Attachment.id)
            .filter(EntryAttachment.entry_id == entry_id)
            .order_by(Attachment.created_at, Attachment.id)
            .all()
        )


class QuestionRepository(BaseRepository[Question]):
    
    def __init__(self, db: Session):
        super().__init__(db, Question)
    
    def find_by_entry(self, entry_id: int) -> List[Question]:
        # newest first
        return self.list_by(order_by=[Question.created_at.desc(), Question.id.desc()], entry_id=entry_id)


class AnswerRepository(BaseRepository[Answer]):
    
    def __init__(self, db: Session):
        super().__init__(db, Answer)
    
    def find_by_question(self, question_id: int) -> List[Answer]:
        return self.list_by(order_by=[Answer.created_at, Answer.id], question_id=question_id)


class AnswerLikeRepository(BaseRepository[AnswerLike]):
    
    def __init__(self, db: Session):
        super().__init__(db, AnswerLike)
    
    def find_user_ids(self, answer_id: int) -> List[int]:
        rows = (
            self.db.query(AnswerLike.user_id)
            .filter(AnswerLike.answer_id == answer_id)
            .order_by(AnswerLike.created_at, AnswerLike.user_id)
            .all()
        )
        return [user_id for (user_id,) in rows]
