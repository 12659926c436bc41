"""
Entries: assignments and announcements inside a course.
"""

import datetime
import logging
from typing import List, Optional

from coursesite_backend.api.exceptions import BadRequestException
from coursesite_backend.domain.attachment import Attachment
from coursesite_backend.domain.base import DomainObject
from coursesite_backend.domain.course import Course
from coursesite_backend.domain.user import User
from coursesite_backend.interface.entries import EntryContext, as_naive_utc
from coursesite_backend.object_cache import CacheKind
from coursesite_backend.permissions.core import Permissioned
from coursesite_backend.repositories import EntryAttachmentRepository, EntryRepository
from coursesite_backend.settings import settings

logger = logging.getLogger(__name__)


class Entry(DomainObject, Permissioned):

    kind = CacheKind.entry
    repository_class = EntryRepository

    @classmethod
    def for_course(cls, uow, course: Course) -> List["Entry"]:
        rows = uow.repository(EntryRepository).find_by_course(course.id)
        return [cls.from_row(uow, row) for row in rows]

    @classmethod
    def create(
        cls,
        uow,
        creator: User,
        course: Course,
        title: str,
        description: str = "",
        display_at: Optional[datetime.datetime] = None,
        due_at: Optional[datetime.datetime] = None,
        visible: bool = False
    ) -> "Entry":
        title = (title or "").strip()
        if not title:
            raise BadRequestException("The entry title cannot be empty.")

        now = uow.now()
        row = uow.repository(EntryRepository).insert(
            course_id=course.id,
            created_at=now,
            created_by=creator.id or None,
            display_at=as_naive_utc(display_at) or now,
            due_at=as_naive_utc(due_at),
            title=title,
            description=description or "",
            visible=visible,
        )
        entry = cls.from_id(uow, row.id)
        uow.mark_dirty(course)
        logger.info(f"Entry {entry.id} created in course {course.id} by user {creator.id}")
        return entry

    @property
    def course_id(self) -> int:
        return self.row.course_id

    @property
    def course(self) -> Course:
        return Course.from_id(self.uow, self.row.course_id)

    @property
    def creator_id(self) -> Optional[int]:
        return self.row.created_by

    @property
    def title(self) -> str:
        return self.row.title

    @property
    def description(self) -> str:
        return self.row.description

    @property
    def display_at(self) -> datetime.datetime:
        return self.row.display_at

    @property
    def due_at(self) -> Optional[datetime.datetime]:
        return self.row.due_at

    @property
    def has_due_time(self) -> bool:
        return self.row.due_at is not None

    @property
    def visible(self) -> bool:
        return bool(self.row.visible)

    def is_creator(self, user: User) -> bool:
        return not user.is_guest and user.id == self.row.created_by

    def _changed(self) -> None:
        self.uow.mark_dirty(self.course)

    def set_title(self, title: str) -> None:
        title = (title or "").strip()
        if not title:
            raise BadRequestException("The entry title cannot be empty.")
        if self._update(title=title):
            self._changed()

    def set_description(self, description: str) -> None:
        if self._update(description=description or ""):
            self._changed()

    def set_due_time(self, due_at: Optional[datetime.datetime]) -> None:
        if self._update(due_at=as_naive_utc(due_at)):
            self._changed()

    def set_display_time(self, display_at: datetime.datetime) -> None:
        if display_at is None:
            raise BadRequestException("An entry needs a display time.")
        if self._update(display_at=as_naive_utc(display_at)):
            self._changed()

    def set_visible(self, visible: bool) -> None:
        if self._update(visible=bool(visible)):
            self._changed()

    def is_important_now(self) -> bool:
        """Visible and either due within the highlight window or displayed today."""
        if not self.visible:
            return False

        today = self.uow.now().date()
        if self.has_due_time:
            due_date = self.due_at.date()
            if today <= due_date <= today + datetime.timedelta(days=settings.IMPORTANT_WINDOW_DAYS):
                return True
        return self.display_at.date() == today

    # permissions

    def can_view(self, user: User) -> bool:
        course = self.course
        if course.can_edit(user) or self.is_creator(user):
            return True
        return course.can_view(user) and self.visible and self.display_at <= self.uow.now()

    def can_edit(self, user: User) -> bool:
        return self.course.can_edit(user) or self.is_creator(user)

    # attachments

    def attachments(self) -> List[Attachment]:
        rows = self.uow.repository(EntryAttachmentRepository).find_attachments(self.id)
        return [Attachment.from_row(self.uow, row) for row in rows]

    def has_attachment(self, attachment: Attachment) -> bool:
        return self.uow.repository(EntryAttachmentRepository).exists(entry_id=self.id, attachment_id=attachment.id)

    def add_attachment(self, attachment: Attachment) -> None:
        if self.has_attachment(attachment):
            return
        self.uow.repository(EntryAttachmentRepository).insert(entry_id=self.id, attachment_id=attachment.id)
        self._changed()

    def remove_attachment(self, attachment: Attachment) -> None:
        if not self.has_attachment(attachment):
            return
        self.uow.repository(EntryAttachmentRepository).delete_where(entry_id=self.id, attachment_id=attachment.id)
        attachment.delete()
        self._changed()

    # content

    def questions(self) -> list:
        from coursesite_backend.domain.question import Question
        return Question.for_entry(self.uow, self)

    def delete(self) -> None:
        course = self.course
        entry_id = self.id

        attachments = self.attachments()

        with self.uow.transaction():
            for question in self.questions():
                question.delete()
            self.uow.repository(EntryAttachmentRepository).delete_where(entry_id=entry_id)
            # blob removal waits for the outermost commit
            for attachment in attachments:
                attachment.delete()
            self.repository.delete(self.row)

        self._forget()
        self.uow.mark_dirty(course)
        logger.info(f"Entry {entry_id} deleted from course {course.id}")

    def get_context(self, user: User) -> Optional[EntryContext]:
        if not self.can_view(user):
            return None

        context = EntryContext(
            entry_id=self.id,
            course_id=self.course_id,
            created_by=User.from_id(self.uow, self.creator_id).get_context(user),
            created_at=self.row.created_at,
            title=self.title,
            description=self.description,
            display_at=self.display_at,
            due_at=self.due_at,
            visible=self.visible,
            is_important=self.is_important_now(),
            can_edit=self.can_edit(user),
        )
        for question in self.questions():
            question_context = question.get_context(user)
            if question_context is not None:
                context.questions.append(question_context)
        context.attachments = [attachment.get_context() for attachment in self.attachments()]
        return context
