from .base import Base, metadata
from .auth import User
from .attachment import Attachment
from .course import (
    Course,
    CourseMember,
    Entry,
    EntryAttachment,
    Question,
    Answer,
    AnswerLike
)
from .notification import Notification

# Import all models to ensure relationships are properly set up
from . import auth, attachment, course, notification

__all__ = [
    'Base',
    'metadata',
    # Auth models
    'User',
    # Storage
    'Attachment',
    # Course models
    'Course',
    'CourseMember',
    'Entry',
    'EntryAttachment',
    'Question',
    'Answer',
    'AnswerLike',
    # Notifications
    'Notification',
]
