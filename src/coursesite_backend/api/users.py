import logging
from typing import Annotated
from fastapi import APIRouter, Depends, Request

from coursesite_backend.api.exceptions import BadRequestException
from coursesite_backend.domain import User
from coursesite_backend.interface.users import EmailVerification, UserContext, UserCreate, UserEmailUpdate, UserPasswordUpdate
from coursesite_backend.permissions.auth import get_current_user, get_signed_in_user
from coursesite_backend.permissions.core import require_admin
from coursesite_backend.unit_of_work import UnitOfWork, get_unit_of_work

logger = logging.getLogger(__name__)

user_router = APIRouter()


@user_router.get("", response_model=UserContext)
def get_me(user: Annotated[User, Depends(get_current_user)]):
    """Get the requesting user, the guest when not signed in"""
    return user.get_context(user)


@user_router.post("", response_model=UserContext, status_code=201)
def create_user(
    request: Request,
    payload: UserCreate,
    user: Annotated[User, Depends(get_current_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """Sign up; only administrators may create other administrators"""
    if payload.is_admin:
        require_admin(user, "Only administrators can create administrators.")

    created = User.create(
        uow,
        payload.first_name,
        payload.last_name,
        payload.email,
        payload.password,
        is_admin=payload.is_admin,
        ip=request.client.host if request.client else None
    )
    return created.get_context(created)


@user_router.get("/{user_id}", response_model=UserContext)
def get_user(
    user_id: int,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    return User.from_id(uow, user_id).get_context(user)


@user_router.put("/password", status_code=204)
def set_password(
    payload: UserPasswordUpdate,
    user: Annotated[User, Depends(get_signed_in_user)]
):
    user.change_password(payload.password)
    logger.info(f"User {user.id} changed their password")


@user_router.put("/email", response_model=UserContext)
def set_email(
    payload: UserEmailUpdate,
    user: Annotated[User, Depends(get_signed_in_user)]
):
    user.change_email(payload.email)
    return user.get_context(user)


@user_router.post("/email/verify", response_model=UserContext)
def verify_email(
    payload: EmailVerification,
    user: Annotated[User, Depends(get_signed_in_user)]
):
    if not user.verify_email(payload.code):
        raise BadRequestException("Invalid verification code.")
    return user.get_context(user)
