"""
Courses and the course membership state machine.

A (course, user) pair is in exactly one of three states: non member,
student or professor. Switching between student and professor passes
through non member, and the membership map is loaded once per instance and
kept in step with every role change made through it.
"""

import logging
from typing import Dict, List, Optional

from coursesite_backend.api.exceptions import BadRequestException
from coursesite_backend.domain.base import DomainObject
from coursesite_backend.domain.user import User
from coursesite_backend.interface.courses import CourseContext
from coursesite_backend.object_cache import CacheKind
from coursesite_backend.permissions.core import Permissioned
from coursesite_backend.permissions.roles import CourseRole, course_role_hierarchy
from coursesite_backend.repositories import CourseMemberRepository, CourseRepository

logger = logging.getLogger(__name__)


def _require_text(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise BadRequestException(f"The course {field} cannot be empty.")
    return value


class Course(DomainObject, Permissioned):

    kind = CacheKind.course
    repository_class = CourseRepository

    def __init__(self, uow, row):
        super().__init__(uow, row)
        # None until first access
        self._members: Optional[Dict[int, CourseRole]] = None
        self._departed: Dict[int, User] = {}
        self.is_deleted = False

    @classmethod
    def for_user(cls, uow, user: User) -> List["Course"]:
        if user.is_guest:
            return []
        repository = uow.repository(CourseRepository)
        rows = repository.find_all() if user.is_admin else repository.find_by_member(user.id)
        return [cls.from_row(uow, row) for row in rows]

    @classmethod
    def create(cls, uow, creator: User, title: str, code: str) -> "Course":
        """Create a course; the creator becomes its first professor."""
        if creator.is_guest:
            raise BadRequestException("Courses must be created by a signed in user.")
        title = _require_text(title, "title")
        code = _require_text(code, "code")

        course = None
        try:
            with uow.transaction():
                row = uow.repository(CourseRepository).insert(
                    created_at=uow.now(),
                    created_by=creator.id,
                    title=title,
                    code=code,
                )
                course = cls.from_id(uow, row.id)
                course.add_professor(creator)
        except Exception:
            if course is not None:
                course._forget()
            raise

        uow.mark_dirty(course)
        logger.info(f"Course {course.id} '{code}' created by user {creator.id}")
        return course

    @property
    def title(self) -> str:
        return self.row.title

    @property
    def code(self) -> str:
        return self.row.code

    @property
    def created_by(self) -> Optional[int]:
        return self.row.created_by

    def is_creator(self, user: User) -> bool:
        return not user.is_guest and user.id == self.row.created_by

    def set_title(self, title: str) -> None:
        if self._update(title=_require_text(title, "title")):
            self.uow.mark_dirty(self)

    def set_code(self, code: str) -> None:
        if self._update(code=_require_text(code, "code")):
            self.uow.mark_dirty(self)

    # membership

    def _load_members(self) -> Dict[int, CourseRole]:
        if self._members is None:
            rows = self.uow.repository(CourseMemberRepository).find_by_course(self.id)
            self._members = {row.user_id: CourseRole(row.course_role) for row in rows}
            logger.debug(f"Loaded {len(self._members)} member(s) of course {self.id}")
        return self._members

    def role_of(self, user: User) -> Optional[CourseRole]:
        if user.is_guest:
            return None
        return self._load_members().get(user.id)

    def is_professor(self, user: User) -> bool:
        return self.role_of(user) == CourseRole.professor

    def is_student(self, user: User) -> bool:
        return self.role_of(user) == CourseRole.student

    def _users_with_role(self, role: CourseRole) -> List[User]:
        return [
            User.from_id(self.uow, user_id)
            for user_id, member_role in self._load_members().items()
            if member_role == role
        ]

    @property
    def professors(self) -> List[User]:
        return self._users_with_role(CourseRole.professor)

    @property
    def students(self) -> List[User]:
        return self._users_with_role(CourseRole.student)

    def add_student(self, user: User) -> None:
        self._set_role(user, CourseRole.student)

    def add_professor(self, user: User) -> None:
        self._set_role(user, CourseRole.professor)

    def remove_user(self, user: User) -> None:
        if self.role_of(user) is None:
            return

        self.uow.repository(CourseMemberRepository).remove(self.id, user.id)
        del self._load_members()[user.id]
        self._departed[user.id] = user
        self.uow.mark_dirty(self)
        logger.info(f"User {user.id} removed from course {self.id}")

    def _set_role(self, user: User, role: CourseRole) -> None:
        if user.is_guest:
            return

        current = self.role_of(user)
        if current == role:
            return

        repository = self.uow.repository(CourseMemberRepository)
        with self.uow.transaction():
            if current is not None:
                repository.remove(self.id, user.id)
            repository.insert(
                course_id=self.id,
                user_id=user.id,
                course_role=role.value,
                created_at=self.uow.now(),
            )

        self._load_members()[user.id] = role
        self._departed.pop(user.id, None)
        self.uow.mark_dirty(self)
        logger.info(f"User {user.id} is now {role.name} of course {self.id} (was {current.name if current else 'non member'})")

    # permissions

    def can_view(self, user: User) -> bool:
        return user.is_admin or self.role_of(user) is not None

    def can_edit(self, user: User) -> bool:
        return user.is_admin or course_role_hierarchy.has_role_permission(self.role_of(user), CourseRole.professor.value)

    # content

    def entries(self) -> list:
        from coursesite_backend.domain.entry import Entry
        return Entry.for_course(self.uow, self)

    def delete(self) -> None:
        """Delete the course with all of its content; members get one last (empty) sync."""
        self._load_members()

        with self.uow.transaction():
            for entry in self.entries():
                entry.delete()
            self.uow.repository(CourseMemberRepository).delete_where(course_id=self.id)
            self.repository.delete(self.row)

        self.is_deleted = True
        self._forget()
        self.uow.mark_dirty(self)
        logger.info(f"Course {self.id} deleted")

    # sync

    def sync_recipients(self) -> List[User]:
        """Members, every admin, and anyone removed from the course in this unit of work."""
        recipients: Dict[int, User] = {}
        for user_id in self._load_members():
            recipients[user_id] = User.from_id(self.uow, user_id)
        for admin in User.all_admins(self.uow):
            recipients.setdefault(admin.id, admin)
        for user_id, user in self._departed.items():
            recipients.setdefault(user_id, user)
        return list(recipients.values())

    def get_context(self, user: User) -> CourseContext:
        can_view = self.can_view(user)
        context = CourseContext(
            course_id=self.id,
            title=self.title,
            code=self.code,
            can_view=can_view,
            can_edit=self.can_edit(user),
        )
        if not can_view:
            return context

        for entry in self.entries():
            entry_context = entry.get_context(user)
            if entry_context is not None:
                context.entries.append(entry_context)
        context.professors = [professor.get_context(user) for professor in self.professors]
        context.students = [student.get_context(user) for student in self.students]
        return context
