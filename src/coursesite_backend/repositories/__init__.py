"""
Repository pattern implementation for direct database access.

The domain layer never issues queries itself; every statement goes through
one of these repositories.
"""

from .base import (
    BaseRepository,
    RepositoryError,
    NotFoundError,
    DuplicateError
)
from .user import UserRepository
from .course import CourseRepository, CourseMemberRepository
from .content import (
    EntryRepository,
    EntryAttachmentRepository,
    QuestionRepository,
    AnswerRepository,
    AnswerLikeRepository
)
from .notification import NotificationRepository
from .attachment import AttachmentRepository

__all__ = [
    "BaseRepository",
    "RepositoryError", 
    "NotFoundError",
    "DuplicateError",
    "UserRepository",
    "CourseRepository",
    "CourseMemberRepository",
    "EntryRepository",
    "EntryAttachmentRepository",
    "QuestionRepository",
    "AnswerRepository",
    "AnswerLikeRepository",
    "NotificationRepository",
    "AttachmentRepository"
]
