from typing import Annotated, Optional
from fastapi import APIRouter, Depends

from coursesite_backend.api.exceptions import NotFoundException
from coursesite_backend.client.push_client import PushServer, get_optional_push_server
from coursesite_backend.domain import Answer, Entry, Question, User, notify
from coursesite_backend.interface.questions import AnswerContext, AnswerCreate, QuestionContext, QuestionCreate, QuestionUpdate
from coursesite_backend.permissions.auth import get_current_user, get_signed_in_user
from coursesite_backend.permissions.core import require_answer, require_edit, require_view
from coursesite_backend.unit_of_work import UnitOfWork, get_unit_of_work

question_router = APIRouter()


def _question_context(question: Question, user: User) -> QuestionContext:
    context = question.get_context(user)
    if context is None:
        raise NotFoundException(f"Question {question.id} does not exist.")
    return context


@question_router.post("/entry/{entry_id}", response_model=QuestionContext, status_code=201)
def create_question(
    entry_id: int,
    payload: QuestionCreate,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    entry = require_view(Entry.from_id(uow, entry_id), user)
    question = Question.create(uow, user, entry, payload.title, payload.text, payload.private)
    return _question_context(question, user)


@question_router.get("/{question_id}", response_model=QuestionContext)
def get_question(
    question_id: int,
    user: Annotated[User, Depends(get_current_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    question = require_view(Question.from_id(uow, question_id), user)
    return _question_context(question, user)


@question_router.patch("/{question_id}", response_model=QuestionContext)
def update_question(
    question_id: int,
    payload: QuestionUpdate,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    question = require_edit(Question.from_id(uow, question_id), user)
    question.set_title(payload.title)
    return _question_context(question, user)


@question_router.post("/{question_id}/closed", response_model=QuestionContext)
def toggle_closed(
    question_id: int,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    question = require_edit(Question.from_id(uow, question_id), user)
    question.set_closed(not question.is_closed)
    return _question_context(question, user)


@question_router.post("/{question_id}/private", response_model=QuestionContext)
def toggle_private(
    question_id: int,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    question = require_edit(Question.from_id(uow, question_id), user)
    question.set_private(not question.is_private)
    return _question_context(question, user)


@question_router.delete("/{question_id}", response_model=dict)
def delete_question(
    question_id: int,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    question = require_edit(Question.from_id(uow, question_id), user)
    question.delete()
    return {"ok": True}


@question_router.post("/{question_id}/answers", response_model=AnswerContext, status_code=201)
def create_answer(
    question_id: int,
    payload: AnswerCreate,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work),
    push_server: Optional[PushServer] = Depends(get_optional_push_server)
):
    """Answer a question and notify the asker"""
    question = require_answer(Question.from_id(uow, question_id), user)
    answer = Answer.create(uow, question, user, payload.text)

    if question.asker_id and question.asker_id != user.id:
        notify(
            uow,
            User.from_id(uow, question.asker_id),
            f"{user.full_name} answered your question \"{question.title}\"",
            link=f"/questions/{question.id}",
            push_server=push_server
        )

    return answer.get_context(user)
