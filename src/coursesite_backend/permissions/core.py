"""
Permission predicates shared by every content entity, and the checks the
API layer performs before touching an entity.
"""

from abc import ABC, abstractmethod

from coursesite_backend.api.exceptions import ForbiddenException, UnauthorizedException


class Permissioned(ABC):
    """Entities whose visibility and edit rights depend on the requesting user."""

    @abstractmethod
    def can_view(self, user) -> bool:
        pass

    @abstractmethod
    def can_edit(self, user) -> bool:
        pass


def require_signed_in(user, message: str = "You must sign in first."):
    if user.is_guest:
        raise UnauthorizedException(message)
    return user


def require_view(entity: Permissioned, user, message: str = None):
    if not entity.can_view(user):
        raise ForbiddenException(message or f"You are not allowed to view this {type(entity).__name__.lower()}.")
    return entity


def require_edit(entity: Permissioned, user, message: str = None):
    if not entity.can_edit(user):
        raise ForbiddenException(message or f"You are not allowed to edit this {type(entity).__name__.lower()}.")
    return entity


def require_answer(question, user, message: str = None):
    if not question.can_answer(user):
        raise ForbiddenException(message or "You are not allowed to answer this question.")
    return question


def require_admin(user, message: str = None):
    if not user.is_admin:
        raise ForbiddenException(message or "Only administrators can do this.")
    return user
