import datetime
import pytest

from coursesite_backend.api.exceptions import ForbiddenException, UnauthorizedException
from coursesite_backend.domain import Answer, Entry, Question, User
from coursesite_backend.permissions.core import require_answer, require_edit, require_signed_in, require_view


@pytest.fixture
def second_student(make_user, course):
    user = make_user("Niklaus", "Wirth", "second@example.org")
    course.add_student(user)
    return user


@pytest.fixture
def entry(uow, course, professor):
    return Entry.create(uow, professor, course, "Week 1", "Sorting", visible=True)


@pytest.fixture
def private_question(uow, entry, student):
    return Question.create(uow, student, entry, "Is quicksort stable?", "Asking for a friend.", private=True)


class TestEntryVisibility:

    def test_visible_entry(self, uow, entry, professor, student, outsider, admin):
        assert entry.can_view(professor)
        assert entry.can_view(student)
        assert entry.can_view(admin)
        assert not entry.can_view(outsider)
        assert not entry.can_view(User.guest(uow))

    def test_hidden_entry_is_for_editors_only(self, uow, course, professor, student):
        hidden = Entry.create(uow, professor, course, "Exam solutions")
        assert hidden.can_view(professor)
        assert not hidden.can_view(student)

    def test_entry_displayed_in_the_future(self, uow, clock, course, professor, student):
        later = Entry.create(uow, professor, course, "Week 2", display_at=clock.now + datetime.timedelta(days=7), visible=True)
        assert not later.can_view(student)

        clock.advance(days=7)
        assert later.can_view(student)

    def test_editing(self, uow, entry, professor, student, admin):
        assert entry.can_edit(professor)
        assert entry.can_edit(admin)
        assert not entry.can_edit(student)


class TestPrivateQuestion:

    def test_visible_to_asker_and_professor_only(self, private_question, professor, student, second_student):
        assert private_question.can_view(student)
        assert private_question.can_view(professor)
        assert not private_question.can_view(second_student)

    def test_public_question_is_visible_to_the_course(self, uow, entry, student, second_student):
        question = Question.create(uow, student, entry, "Merge sort", "Why n log n?")
        assert question.can_view(second_student)

    def test_asker_can_edit(self, private_question, student, second_student, professor):
        assert private_question.can_edit(student)
        assert private_question.can_edit(professor)
        assert not private_question.can_edit(second_student)


class TestClosedQuestion:

    def test_only_editors_answer_closed_questions(self, uow, entry, student, second_student, professor):
        question = Question.create(uow, student, entry, "Heaps", "What is a heap?")
        assert question.can_answer(second_student)

        question.set_closed(True)
        assert not question.can_answer(second_student)
        assert question.can_answer(professor)

    def test_answering_a_closed_question_is_rejected(self, uow, entry, student, second_student):
        question = Question.create(uow, student, entry, "Heaps", "What is a heap?")
        question.set_closed(True)

        with pytest.raises(ForbiddenException):
            Answer.create(uow, question, second_student, "A tree.")


class TestAnswerPermissions:

    def test_course_editors_edit_answers(self, uow, entry, student, professor, admin):
        question = Question.create(uow, student, entry, "Graphs", "BFS or DFS?")
        answer = question.first_answer

        assert answer.can_edit(professor)
        assert answer.can_edit(admin)
        assert not answer.can_edit(student)

    def test_author_keeps_view_access(self, uow, course, entry, student):
        question = Question.create(uow, student, entry, "Graphs", "BFS or DFS?")
        course.remove_user(student)
        assert question.first_answer.can_view(student)


class TestMonotonicity:

    def test_edit_implies_view(self, uow, course, entry, private_question, professor, student, second_student, outsider, admin):
        hidden = Entry.create(uow, professor, course, "Draft")
        answer = Answer.create(uow, private_question, professor, "No, it is not.")
        users = [professor, student, second_student, outsider, admin, User.guest(uow)]

        for entity in [course, entry, hidden, private_question, answer]:
            for user in users:
                if entity.can_edit(user):
                    assert entity.can_view(user), f"{entity} editable but not visible for {user}"


class TestRequireHelpers:

    def test_require_view(self, entry, student, outsider):
        assert require_view(entry, student) is entry
        with pytest.raises(ForbiddenException):
            require_view(entry, outsider)

    def test_require_edit(self, entry, student):
        with pytest.raises(ForbiddenException):
            require_edit(entry, student)

    def test_require_answer(self, uow, private_question, second_student):
        with pytest.raises(ForbiddenException):
            require_answer(private_question, second_student)

    def test_require_signed_in(self, uow, student):
        assert require_signed_in(student) is student
        with pytest.raises(UnauthorizedException):
            require_signed_in(User.guest(uow))
