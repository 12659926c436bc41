from typing import Annotated
from fastapi import APIRouter, Depends

from coursesite_backend.api.exceptions import NotFoundException
from coursesite_backend.domain import Answer, User
from coursesite_backend.interface.questions import AnswerContext, AnswerUpdate
from coursesite_backend.permissions.auth import get_current_user, get_signed_in_user
from coursesite_backend.permissions.core import require_edit, require_view
from coursesite_backend.unit_of_work import UnitOfWork, get_unit_of_work

answer_router = APIRouter()


def _answer_context(answer: Answer, user: User) -> AnswerContext:
    context = answer.get_context(user)
    if context is None:
        raise NotFoundException(f"Answer {answer.id} does not exist.")
    return context


@answer_router.get("/{answer_id}", response_model=AnswerContext)
def get_answer(
    answer_id: int,
    user: Annotated[User, Depends(get_current_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    answer = require_view(Answer.from_id(uow, answer_id), user)
    return _answer_context(answer, user)


@answer_router.patch("/{answer_id}", response_model=AnswerContext)
def edit_answer(
    answer_id: int,
    payload: AnswerUpdate,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    answer = require_edit(Answer.from_id(uow, answer_id), user)
    answer.edit(user, payload.text)
    return _answer_context(answer, user)


@answer_router.delete("/{answer_id}", response_model=dict)
def delete_answer(
    answer_id: int,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """Deleting the first answer of a question deletes the question"""
    answer = require_edit(Answer.from_id(uow, answer_id), user)
    question_deleted = answer.is_first_answer()
    answer.delete()
    return {"ok": True, "question_deleted": question_deleted}


@answer_router.post("/{answer_id}/like", response_model=AnswerContext)
def toggle_like(
    answer_id: int,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    answer = require_view(Answer.from_id(uow, answer_id), user)
    answer.toggle_like(user)
    return _answer_context(answer, user)
