import datetime
import logging
from typing import List, Optional

from coursesite_backend.api.exceptions import BadRequestException, ForbiddenException
from coursesite_backend.domain.base import DomainObject
from coursesite_backend.domain.user import User
from coursesite_backend.interface.questions import AnswerContext
from coursesite_backend.object_cache import CacheKind
from coursesite_backend.permissions.core import Permissioned
from coursesite_backend.repositories import AnswerLikeRepository, AnswerRepository

logger = logging.getLogger(__name__)


def clean_answer_text(text: Optional[str]) -> str:
    """Trim answer text, rejecting text that is empty afterwards."""
    text = (text or "").strip()
    if not text:
        raise BadRequestException("Answer text cannot be empty.")
    return text


class Answer(DomainObject, Permissioned):

    kind = CacheKind.answer
    repository_class = AnswerRepository

    def __init__(self, uow, row):
        super().__init__(uow, row)
        self._likes: Optional[List[int]] = None

    @classmethod
    def for_question(cls, uow, question) -> List["Answer"]:
        rows = uow.repository(AnswerRepository).find_by_question(question.id)
        return [cls.from_row(uow, row) for row in rows]

    @classmethod
    def create(cls, uow, question, author: User, text: str) -> "Answer":
        if author.is_guest or not question.can_answer(author):
            raise ForbiddenException("You are not allowed to answer this question.")
        text = clean_answer_text(text)

        now = uow.now()
        row = uow.repository(AnswerRepository).insert(
            question_id=question.id,
            created_at=now,
            created_by=author.id,
            edited_at=now,
            edited_by=author.id,
            text=text,
        )
        answer = cls.from_id(uow, row.id)
        question.invalidate_answers()
        uow.mark_dirty(question.course)
        logger.info(f"Answer {answer.id} posted to question {question.id} by user {author.id}")
        return answer

    @property
    def question_id(self) -> int:
        return self.row.question_id

    @property
    def question(self):
        from coursesite_backend.domain.question import Question
        return Question.from_id(self.uow, self.row.question_id)

    @property
    def author_id(self) -> Optional[int]:
        return self.row.created_by

    @property
    def editor_id(self) -> Optional[int]:
        return self.row.edited_by

    @property
    def text(self) -> str:
        return self.row.text

    @property
    def created_at(self) -> datetime.datetime:
        return self.row.created_at

    @property
    def edited_at(self) -> datetime.datetime:
        return self.row.edited_at

    def is_edited(self) -> bool:
        return self.row.edited_at != self.row.created_at

    def is_author(self, user: User) -> bool:
        return not user.is_guest and user.id == self.row.created_by

    def is_first_answer(self) -> bool:
        return self.question.first_answer_id == self.id

    def edit(self, editor: User, text: str) -> None:
        text = clean_answer_text(text)
        if text == self.row.text:
            return

        edited_at = self.uow.now()
        # edited_at must never equal created_at once the text changed
        if edited_at <= self.row.created_at:
            edited_at = self.row.created_at + datetime.timedelta(microseconds=1)

        self._update(text=text, edited_at=edited_at, edited_by=editor.id or None)
        self.uow.mark_dirty(self.question.course)

    # permissions

    def can_view(self, user: User) -> bool:
        return self.question.can_view(user) or self.is_author(user)

    def can_edit(self, user: User) -> bool:
        return self.question.course.can_edit(user)

    # likes

    def likes(self) -> List[int]:
        if self._likes is None:
            self._likes = self.uow.repository(AnswerLikeRepository).find_user_ids(self.id)
        return self._likes

    def is_liked_by(self, user: User) -> bool:
        return not user.is_guest and user.id in self.likes()

    def is_professor_liked(self) -> bool:
        course = self.question.course
        return any(course.is_professor(User.from_id(self.uow, user_id)) for user_id in self.likes())

    def toggle_like(self, user: User) -> bool:
        """Like or unlike the answer for user, returning whether it is liked afterwards."""
        if user.is_guest:
            raise ForbiddenException("You must sign in to like answers.")

        repository = self.uow.repository(AnswerLikeRepository)
        likes = self.likes()
        if user.id in likes:
            repository.delete_where(answer_id=self.id, user_id=user.id)
            likes.remove(user.id)
            liked = False
        else:
            repository.insert(answer_id=self.id, user_id=user.id, created_at=self.uow.now())
            likes.append(user.id)
            liked = True

        self.uow.mark_dirty(self.question.course)
        return liked

    # deletion

    def delete_row(self) -> None:
        """Remove this answer and its likes without touching the question."""
        self.uow.repository(AnswerLikeRepository).delete_where(answer_id=self.id)
        self.repository.delete(self.row)
        self._likes = None
        self._forget()

    def delete(self) -> None:
        """Delete the answer; deleting the first answer deletes the whole question."""
        question = self.question
        if question.first_answer_id == self.id:
            question.delete()
            return

        with self.uow.transaction():
            self.delete_row()
        question.invalidate_answers()
        self.uow.mark_dirty(question.course)
        logger.info(f"Answer {self.id} deleted from question {question.id}")

    def get_context(self, user: User) -> Optional[AnswerContext]:
        if not self.can_view(user):
            return None

        liked_by = [User.from_id(self.uow, user_id) for user_id in self.likes()]
        return AnswerContext(
            answer_id=self.id,
            question_id=self.question_id,
            created_at=self.created_at,
            created_by=User.from_id(self.uow, self.author_id).get_context(user),
            edited=self.is_edited(),
            edited_at=self.edited_at,
            edited_by=User.from_id(self.uow, self.editor_id).get_context(user),
            text=self.text,
            likes=len(liked_by),
            liked_by=[liker.get_context(user) for liker in liked_by],
            liked=self.is_liked_by(user),
            professor_liked=self.is_professor_liked(),
            can_edit=self.can_edit(user),
        )
