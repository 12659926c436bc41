import logging
from typing import Annotated, List
from fastapi import APIRouter, Depends

from coursesite_backend.api.exceptions import BadRequestException, ForbiddenException
from coursesite_backend.domain import Course, User
from coursesite_backend.interface.courses import (
    CourseContext,
    CourseCreate,
    CourseMemberRoleUpdate,
    CourseMembersAdd,
    CourseUpdate
)
from coursesite_backend.permissions.auth import get_current_user, get_signed_in_user
from coursesite_backend.permissions.core import require_admin, require_edit, require_view
from coursesite_backend.unit_of_work import UnitOfWork, get_unit_of_work

logger = logging.getLogger(__name__)

course_router = APIRouter()


@course_router.get("", response_model=List[CourseContext])
def list_courses(
    user: Annotated[User, Depends(get_current_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """Courses the requesting user belongs to; administrators see every course"""
    return [course.get_context(user) for course in Course.for_user(uow, user)]


@course_router.post("", response_model=CourseContext, status_code=201)
def create_course(
    payload: CourseCreate,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    require_admin(user, "Only administrators can create courses.")
    return Course.create(uow, user, payload.title, payload.code).get_context(user)


@course_router.get("/{course_id}", response_model=CourseContext)
def get_course(
    course_id: int,
    user: Annotated[User, Depends(get_current_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    course = require_view(Course.from_id(uow, course_id), user)
    return course.get_context(user)


@course_router.patch("/{course_id}", response_model=CourseContext)
def update_course(
    course_id: int,
    payload: CourseUpdate,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    course = require_edit(Course.from_id(uow, course_id), user)
    course.set_title(payload.title)
    course.set_code(payload.code)
    return course.get_context(user)


@course_router.delete("/{course_id}", response_model=dict)
def delete_course(
    course_id: int,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    course = Course.from_id(uow, course_id)
    require_admin(user, "Only administrators can delete courses.")
    course.delete()
    return {"ok": True}


@course_router.post("/{course_id}/students", response_model=CourseContext)
def add_students(
    course_id: int,
    payload: CourseMembersAdd,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """Add students by a comma separated list of email addresses; unknown addresses are skipped"""
    course = require_edit(Course.from_id(uow, course_id), user)

    emails = [email.strip() for email in payload.emails.split(",") if email.strip()]
    if not emails:
        raise BadRequestException("No email addresses given.")

    for email in emails:
        student = User.from_email(uow, email)
        if student.is_guest:
            logger.info(f"Skipping unknown email '{email}' for course {course.id}")
            continue
        if course.role_of(student) is None:
            course.add_student(student)

    return course.get_context(user)


@course_router.put("/{course_id}/members/{user_id}", response_model=CourseContext)
def set_member_role(
    course_id: int,
    user_id: int,
    payload: CourseMemberRoleUpdate,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    course = require_edit(Course.from_id(uow, course_id), user)
    member = User.from_id(uow, user_id)
    if member.is_guest:
        raise BadRequestException("Guests cannot be course members.")

    if payload.professor:
        course.add_professor(member)
    else:
        if course.is_creator(member):
            raise ForbiddenException("The course creator cannot be demoted.")
        course.add_student(member)

    return course.get_context(user)


@course_router.delete("/{course_id}/members/{user_id}", response_model=CourseContext)
def remove_member(
    course_id: int,
    user_id: int,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    course = require_edit(Course.from_id(uow, course_id), user)
    member = User.from_id(uow, user_id)
    if course.is_creator(member):
        raise ForbiddenException("The course creator cannot be removed.")

    course.remove_user(member)
    return course.get_context(user)
