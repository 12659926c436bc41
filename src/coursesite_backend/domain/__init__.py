"""
Domain objects of the course site.

Import order matters: the content tree modules import their parents.
"""

from .user import User
from .attachment import Attachment
from .course import Course
from .entry import Entry
from .answer import Answer
from .question import Question
from .notification import Notification, notify

__all__ = [
    "User",
    "Attachment",
    "Course",
    "Entry",
    "Question",
    "Answer",
    "Notification",
    "notify",
]
