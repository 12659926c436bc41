import pytest
from unittest.mock import patch

from coursesite_backend.api.exceptions import BadRequestException
from coursesite_backend.domain import Course, User
from coursesite_backend.permissions.roles import CourseRole, course_role_hierarchy
from coursesite_backend.repositories import CourseMemberRepository, RepositoryError


class TestCourseCreation:

    def test_creator_becomes_the_only_professor(self, uow, admin, outsider):
        course = Course.create(uow, admin, "Test Course", "testcourse-001")

        assert course.professors == [admin]
        assert course.students == []
        assert course.can_edit(admin)
        assert not course.can_view(outsider)
        assert course.is_creator(admin)

    def test_creation_marks_course_dirty(self, uow, admin):
        course = Course.create(uow, admin, "Test Course", "testcourse-001")
        assert uow.sync.is_dirty(course.id)

    def test_guest_cannot_create(self, uow):
        with pytest.raises(BadRequestException):
            Course.create(uow, User.guest(uow), "Test Course", "testcourse-001")

    def test_empty_title_is_rejected_before_writing(self, uow, admin):
        with pytest.raises(BadRequestException):
            Course.create(uow, admin, "   ", "testcourse-001")
        assert uow.repository(Course.repository_class).list_by() == []

    def test_for_user(self, uow, admin, professor, student, outsider, course):
        other = Course.create(uow, admin, "Databases", "DB-1")

        assert Course.for_user(uow, student) == [course]
        assert Course.for_user(uow, outsider) == []
        assert set(Course.for_user(uow, admin)) == {course, other}
        assert Course.for_user(uow, User.guest(uow)) == []


class TestMembershipStateMachine:

    def test_promote_student(self, uow, course, student):
        course.add_professor(student)

        assert course.role_of(student) == CourseRole.professor
        assert course.is_professor(student)
        assert not course.is_student(student)
        assert student in course.professors
        assert student not in course.students

    def test_demote_professor(self, uow, course, professor):
        course.add_student(professor)
        assert course.role_of(professor) == CourseRole.student
        assert professor not in course.professors

    def test_role_switch_keeps_one_persisted_row(self, uow, course, student):
        course.add_professor(student)
        course.add_student(student)
        course.add_professor(student)

        rows = [row for row in uow.repository(CourseMemberRepository).find_by_course(course.id) if row.user_id == student.id]
        assert len(rows) == 1
        assert rows[0].course_role == CourseRole.professor.value

    def test_same_role_is_a_noop(self, uow, course, student):
        course.add_student(student)
        assert not uow.sync.is_dirty(course.id)

    def test_guest_is_never_a_member(self, uow, course):
        guest = User.guest(uow)
        course.add_student(guest)
        course.add_professor(guest)

        assert course.role_of(guest) is None
        assert not uow.sync.is_dirty(course.id)

    def test_remove_user(self, uow, course, student):
        course.remove_user(student)

        assert course.role_of(student) is None
        assert not course.can_view(student)
        assert uow.sync.is_dirty(course.id)

    def test_remove_non_member_is_a_noop(self, uow, course, outsider):
        course.remove_user(outsider)
        assert not uow.sync.is_dirty(course.id)

    def test_membership_is_read_back_in_a_new_unit_of_work(self, session, course, student, professor):
        from coursesite_backend.unit_of_work import UnitOfWork

        fresh = Course.from_id(UnitOfWork(session), course.id)
        assert fresh.is_student(student)
        assert fresh.is_professor(professor)

    def test_failed_write_leaves_memory_untouched(self, uow, course, student):
        repository = uow.repository(CourseMemberRepository)
        with patch.object(repository, "insert", side_effect=RepositoryError("database down")):
            with pytest.raises(RepositoryError):
                course.add_professor(student)

        assert course.role_of(student) == CourseRole.student
        assert not uow.sync.is_dirty(course.id)


class TestRoleHierarchy:

    def test_professor_satisfies_student(self):
        assert course_role_hierarchy.has_role_permission(CourseRole.professor.value, CourseRole.student.value)

    def test_student_does_not_satisfy_professor(self):
        assert not course_role_hierarchy.has_role_permission(CourseRole.student.value, CourseRole.professor.value)

    def test_no_role_satisfies_nothing(self):
        assert not course_role_hierarchy.has_role_permission(None, CourseRole.student.value)
