import datetime
import pytest
from unittest.mock import patch

from coursesite_backend.api.exceptions import BadRequestException, ForbiddenException
from coursesite_backend.domain import Answer, Entry, Question
from coursesite_backend.interface.entries import EntryUpdate
from coursesite_backend.repositories import (
    AnswerLikeRepository,
    AnswerRepository,
    EntryRepository,
    QuestionRepository,
    RepositoryError
)


@pytest.fixture
def entry(uow, course, professor, sink):
    entry = Entry.create(uow, professor, course, "Week 1", "Sorting", visible=True)
    uow.sync.flush()
    sink.reset_mock()
    return entry


@pytest.fixture
def question(uow, entry, student, sink):
    question = Question.create(uow, student, entry, "Quicksort", "Is it stable?")
    uow.sync.flush()
    sink.reset_mock()
    return question


class TestIdempotentSetters:

    def test_entry_setters(self, uow, entry):
        repository = uow.repository(EntryRepository)
        with patch.object(repository, "update", wraps=repository.update) as update:
            entry.set_title("Week 1")
            entry.set_description("Sorting")
            entry.set_visible(True)
            entry.set_due_time(None)
            entry.set_display_time(entry.display_at)

        update.assert_not_called()
        assert not uow.sync.is_dirty(entry.course.id)

    def test_question_setters(self, uow, question):
        repository = uow.repository(QuestionRepository)
        with patch.object(repository, "update", wraps=repository.update) as update:
            question.set_title("Quicksort")
            question.set_private(False)
            question.set_closed(False)

        update.assert_not_called()
        assert not uow.sync.is_dirty(question.course.id)

    def test_course_setters(self, uow, course):
        course.set_title(course.title)
        course.set_code(course.code)
        assert not uow.sync.is_dirty(course.id)

    def test_answer_edit_with_same_text(self, uow, question, professor):
        answer = question.first_answer
        edited_at = answer.edited_at
        answer.edit(professor, "Is it stable?")

        assert answer.edited_at == edited_at
        assert not uow.sync.is_dirty(question.course.id)

    def test_changed_value_is_persisted_and_marks_dirty(self, uow, session, entry):
        entry.set_title("Week one")

        assert uow.sync.is_dirty(entry.course.id)
        session.expire_all()
        assert uow.repository(EntryRepository).get_by_id(entry.id).title == "Week one"


class TestEntry:

    def test_create_defaults(self, uow, clock, course, professor):
        entry = Entry.create(uow, professor, course, "  Week 2 ")

        assert entry.title == "Week 2"
        assert entry.display_at == clock.now
        assert not entry.visible
        assert not entry.has_due_time
        assert entry in course.entries()

    def test_empty_title_is_rejected(self, uow, course, professor):
        with pytest.raises(BadRequestException):
            Entry.create(uow, professor, course, "  ")

    def test_importance(self, uow, clock, entry):
        assert entry.is_important_now()

        clock.advance(days=1)
        assert not entry.is_important_now()

        entry.set_due_time(clock.now + datetime.timedelta(days=3))
        assert entry.is_important_now()

        entry.set_due_time(clock.now + datetime.timedelta(days=30))
        assert not entry.is_important_now()

        entry.set_due_time(clock.now + datetime.timedelta(days=3))
        entry.set_visible(False)
        assert not entry.is_important_now()

    def test_times_with_an_offset_are_stored_as_utc(self, uow, entry, student):
        cet = datetime.timezone(datetime.timedelta(hours=1))
        entry.set_display_time(datetime.datetime(2024, 3, 4, 10, 30, tzinfo=cet))
        entry.set_due_time(datetime.datetime(2024, 3, 8, 12, 0, tzinfo=datetime.timezone.utc))

        assert entry.display_at == datetime.datetime(2024, 3, 4, 9, 30)
        assert entry.due_at == datetime.datetime(2024, 3, 8, 12, 0)
        assert entry.can_view(student)
        assert entry.is_important_now()

    def test_update_body_converts_offsets(self):
        body = EntryUpdate(title="Week 1", display_at="2024-03-01T09:00:00Z", due_at="2024-03-08T01:00:00+02:00")

        assert body.display_at == datetime.datetime(2024, 3, 1, 9, 0)
        assert body.due_at == datetime.datetime(2024, 3, 7, 23, 0)
        assert body.display_at.tzinfo is None

    def test_delete_removes_questions(self, uow, entry, question):
        question_id = question.id
        entry.delete()

        assert Question.find(uow, question_id) is None
        assert uow.repository(EntryRepository).get_by_id_optional(entry.id) is None
        assert uow.sync.is_dirty(entry.course_id)


class TestQuestionCreation:

    def test_first_answer_is_written_with_the_question(self, uow, question, student):
        first = question.first_answer

        assert first is not None
        assert first.text == "Is it stable?"
        assert question.asker_id == student.id
        assert question.is_asker(student)
        assert question.answers() == [first]

    def test_text_is_validated_before_any_write(self, uow, entry, student):
        with pytest.raises(BadRequestException):
            Question.create(uow, student, entry, "Quicksort", "   ")
        assert uow.repository(QuestionRepository).list_by() == []

    def test_failed_first_answer_rolls_back_the_question(self, uow, entry, student):
        repository = uow.repository(AnswerRepository)
        with patch.object(repository, "insert", side_effect=RepositoryError("disk full")):
            with pytest.raises(RepositoryError):
                Question.create(uow, student, entry, "Quicksort", "Is it stable?")

        assert uow.repository(QuestionRepository).list_by() == []
        assert not uow.sync.is_dirty(entry.course_id)

    def test_outsider_cannot_ask(self, uow, entry, outsider):
        with pytest.raises(ForbiddenException):
            Question.create(uow, outsider, entry, "Quicksort", "Is it stable?")

    def test_creation_marks_course_dirty(self, uow, entry, student):
        Question.create(uow, student, entry, "Mergesort", "Why is it stable?")
        assert uow.sync.is_dirty(entry.course_id)


class TestAnswers:

    def test_create_trims_text(self, uow, question, professor):
        answer = Answer.create(uow, question, professor, "  Not in general.  ")

        assert answer.text == "Not in general."
        assert answer.edited_at == answer.created_at
        assert not answer.is_edited()
        assert question.answers()[-1] is answer

    def test_empty_answer_is_rejected(self, uow, question, professor):
        with pytest.raises(BadRequestException):
            Answer.create(uow, question, professor, " \n ")

    def test_edit_marks_edited(self, uow, clock, question, professor):
        answer = Answer.create(uow, question, professor, "Not in general.")
        clock.advance(minutes=5)
        answer.edit(professor, "Not in general, see the notes.")

        assert answer.edited_at > answer.created_at
        assert answer.is_edited()
        assert answer.editor_id == professor.id

    def test_edit_within_the_same_instant(self, uow, question, professor):
        answer = Answer.create(uow, question, professor, "Not in general.")
        answer.edit(professor, "Depends on the partition scheme.")

        assert answer.edited_at > answer.created_at
        assert answer.is_edited()

    def test_first_answer_cascade(self, uow, session, question, professor):
        reply = Answer.create(uow, question, professor, "Not in general.")
        question_id, reply_id = question.id, reply.id

        question.first_answer.delete()

        assert Question.find(uow, question_id) is None
        assert Answer.find(uow, reply_id) is None
        session.expire_all()
        assert uow.repository(AnswerRepository).list_by(question_id=question_id) == []

    def test_deleting_a_reply_keeps_the_question(self, uow, question, professor):
        reply = Answer.create(uow, question, professor, "Not in general.")
        reply.delete()

        assert Question.find(uow, question.id) is question
        assert question.answers() == [question.first_answer]


class TestLikes:

    def test_toggle_like(self, uow, question, student, professor):
        answer = Answer.create(uow, question, professor, "Not in general.")

        assert answer.toggle_like(student) is True
        assert answer.is_liked_by(student)
        assert answer.likes() == [student.id]
        assert not answer.is_professor_liked()

        assert answer.toggle_like(student) is False
        assert not answer.is_liked_by(student)
        assert uow.repository(AnswerLikeRepository).find_user_ids(answer.id) == []

    def test_like_again_after_unlike(self, uow, question, student, professor):
        answer = Answer.create(uow, question, professor, "Not in general.")
        answer.toggle_like(student)
        answer.toggle_like(student)
        assert answer.toggle_like(student) is True
        assert uow.repository(AnswerLikeRepository).find_user_ids(answer.id) == [student.id]

    def test_professor_like(self, uow, question, professor):
        answer = question.first_answer
        answer.toggle_like(professor)
        assert answer.is_professor_liked()

    def test_guest_cannot_like(self, uow, question):
        from coursesite_backend.domain import User

        with pytest.raises(ForbiddenException):
            question.first_answer.toggle_like(User.guest(uow))


class TestContexts:

    def test_hidden_entries_are_left_out(self, uow, course, entry, professor, student):
        Entry.create(uow, professor, course, "Draft")

        assert len(course.get_context(professor).entries) == 2
        assert [e.entry_id for e in course.get_context(student).entries] == [entry.id]

    def test_private_questions_are_left_out(self, uow, make_user, course, entry, student):
        classmate = make_user("Tony", "Hoare", "classmate@example.org")
        course.add_student(classmate)
        private = Question.create(uow, student, entry, "My grade", "Why?", private=True)

        questions = course.get_context(classmate).entries[0].questions
        assert private.id not in [q.question_id for q in questions]
        assert private.get_context(classmate) is None
        assert private.get_context(student) is not None

    def test_outsider_sees_only_the_course_header(self, course, entry, outsider):
        context = course.get_context(outsider)

        assert context.can_view is False
        assert context.entries == []
        assert context.professors == []

    def test_answer_context(self, uow, question, professor, student):
        answer = Answer.create(uow, question, professor, "Not in general.")
        answer.toggle_like(student)
        context = answer.get_context(student)

        assert context.likes == 1
        assert context.liked is True
        assert context.professor_liked is False
        assert context.can_edit is False
        assert context.created_by.user_id == professor.id
