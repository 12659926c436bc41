"""
Questions asked inside an entry.

The author of a question's first answer is its asker. Creating a question
inserts the question, inserts the first answer and points the question at
it, all in one transaction, so no question is ever stored without an asker.
"""

import datetime
import logging
from typing import List, Optional

from coursesite_backend.api.exceptions import BadRequestException, ForbiddenException
from coursesite_backend.domain.answer import Answer, clean_answer_text
from coursesite_backend.domain.base import DomainObject
from coursesite_backend.domain.course import Course
from coursesite_backend.domain.entry import Entry
from coursesite_backend.domain.user import User
from coursesite_backend.interface.questions import QuestionContext
from coursesite_backend.object_cache import CacheKind
from coursesite_backend.permissions.core import Permissioned
from coursesite_backend.repositories import AnswerRepository, QuestionRepository

logger = logging.getLogger(__name__)


class Question(DomainObject, Permissioned):

    kind = CacheKind.question
    repository_class = QuestionRepository

    def __init__(self, uow, row):
        super().__init__(uow, row)
        self._answers: Optional[List[Answer]] = None

    @classmethod
    def for_entry(cls, uow, entry: Entry) -> List["Question"]:
        rows = uow.repository(QuestionRepository).find_by_entry(entry.id)
        return [cls.from_row(uow, row) for row in rows]

    @classmethod
    def create(cls, uow, creator: User, entry: Entry, title: str, text: str, private: bool = False) -> "Question":
        if creator.is_guest or not entry.can_view(creator):
            raise ForbiddenException("You are not allowed to ask a question in this entry.")

        title = (title or "").strip()
        if not title:
            raise BadRequestException("The question title cannot be empty.")
        text = clean_answer_text(text)

        repository = uow.repository(QuestionRepository)
        now = uow.now()

        with uow.transaction():
            row = repository.insert(
                entry_id=entry.id,
                title=title,
                is_private=bool(private),
                is_closed=False,
                created_at=now,
            )
            first_answer = uow.repository(AnswerRepository).insert(
                question_id=row.id,
                created_at=now,
                created_by=creator.id,
                edited_at=now,
                edited_by=creator.id,
                text=text,
            )
            repository.update(row, first_answer_id=first_answer.id)

        question = cls.from_id(uow, row.id)
        uow.mark_dirty(entry.course)
        logger.info(f"Question {question.id} asked in entry {entry.id} by user {creator.id}")
        return question

    @property
    def entry_id(self) -> int:
        return self.row.entry_id

    @property
    def entry(self) -> Entry:
        return Entry.from_id(self.uow, self.row.entry_id)

    @property
    def course(self) -> Course:
        return self.entry.course

    @property
    def title(self) -> str:
        return self.row.title

    @property
    def is_private(self) -> bool:
        return bool(self.row.is_private)

    @property
    def is_closed(self) -> bool:
        return bool(self.row.is_closed)

    @property
    def created_at(self) -> datetime.datetime:
        return self.row.created_at

    @property
    def first_answer_id(self) -> Optional[int]:
        return self.row.first_answer_id

    @property
    def first_answer(self) -> Optional[Answer]:
        return Answer.find(self.uow, self.row.first_answer_id)

    @property
    def asker_id(self) -> Optional[int]:
        first_answer = self.first_answer
        return first_answer.author_id if first_answer is not None else None

    def is_asker(self, user: User) -> bool:
        return not user.is_guest and user.id == self.asker_id

    def _changed(self) -> None:
        self.uow.mark_dirty(self.course)

    def set_title(self, title: str) -> None:
        title = (title or "").strip()
        if not title:
            raise BadRequestException("The question title cannot be empty.")
        if self._update(title=title):
            self._changed()

    def set_private(self, private: bool) -> None:
        if self._update(is_private=bool(private)):
            self._changed()

    def set_closed(self, closed: bool) -> None:
        if self._update(is_closed=bool(closed)):
            self._changed()

    # permissions

    def can_view(self, user: User) -> bool:
        entry = self.entry
        if not entry.can_view(user):
            return False
        if not self.is_private:
            return True
        return entry.can_edit(user) or self.is_asker(user)

    def can_edit(self, user: User) -> bool:
        if self.course.can_edit(user):
            return True
        return self.is_asker(user) and self.can_view(user)

    def can_answer(self, user: User) -> bool:
        if not self.can_view(user):
            return False
        return not self.is_closed or self.course.can_edit(user)

    # answers

    def answers(self) -> List[Answer]:
        if self._answers is None:
            self._answers = Answer.for_question(self.uow, self)
        return self._answers

    def invalidate_answers(self) -> None:
        self._answers = None

    def delete(self) -> None:
        """Delete the question together with every answer and like."""
        course = self.course
        question_id = self.id

        with self.uow.transaction():
            if self.row.first_answer_id is not None:
                self.repository.update(self.row, first_answer_id=None)
            for answer in Answer.for_question(self.uow, self):
                answer.delete_row()
            self.repository.delete(self.row)

        self._answers = None
        self._forget()
        self.uow.mark_dirty(course)
        logger.info(f"Question {question_id} deleted")

    def get_context(self, user: User) -> Optional[QuestionContext]:
        if not self.can_view(user):
            return None

        context = QuestionContext(
            question_id=self.id,
            entry_id=self.entry_id,
            course_id=self.course.id,
            title=self.title,
            created_at=self.created_at,
            is_private=self.is_private,
            is_closed=self.is_closed,
            can_answer=self.can_answer(user),
            can_edit=self.can_edit(user),
        )
        for answer in self.answers():
            answer_context = answer.get_context(user)
            if answer_context is not None:
                context.answers.append(answer_context)
        return context
