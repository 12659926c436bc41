from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, ForeignKey,
    Index, Integer, String, Text, func
)

from .base import Base


class Course(Base):
    __tablename__ = 'course'

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    created_by = Column(ForeignKey('user.id', ondelete='SET NULL'))
    title = Column(String(255), nullable=False)
    code = Column(String(255), nullable=False)


class CourseMember(Base):
    __tablename__ = 'course_member'
    __table_args__ = (
        CheckConstraint("course_role IN ('_student', '_professor')", name='ck_course_member_role'),
        Index('course_member_user_key', 'user_id'),
    )

    course_id = Column(ForeignKey('course.id', ondelete='CASCADE'), primary_key=True)
    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), primary_key=True)
    course_role = Column(String(32), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


class Entry(Base):
    __tablename__ = 'entry'
    __table_args__ = (
        Index('entry_course_display_key', 'course_id', 'display_at'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(ForeignKey('course.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    created_by = Column(ForeignKey('user.id', ondelete='SET NULL'))
    display_at = Column(DateTime, nullable=False)
    due_at = Column(DateTime)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    visible = Column(Boolean, nullable=False, default=False)


class EntryAttachment(Base):
    __tablename__ = 'entry_attachment'

    entry_id = Column(ForeignKey('entry.id', ondelete='CASCADE'), primary_key=True)
    attachment_id = Column(ForeignKey('attachment.id', ondelete='CASCADE'), primary_key=True)


class Question(Base):
    __tablename__ = 'question'
    __table_args__ = (
        Index('question_entry_created_key', 'entry_id', 'created_at'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    entry_id = Column(ForeignKey('entry.id', ondelete='CASCADE'), nullable=False)
    title = Column(String(255), nullable=False)
    is_private = Column(Boolean, nullable=False, default=False)
    is_closed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    first_answer_id = Column(ForeignKey('answer.id', ondelete='SET NULL', use_alter=True, name='fk_question_first_answer'))


class Answer(Base):
    __tablename__ = 'answer'
    __table_args__ = (
        Index('answer_question_created_key', 'question_id', 'created_at'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(ForeignKey('question.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    created_by = Column(ForeignKey('user.id', ondelete='SET NULL'))
    edited_at = Column(DateTime, nullable=False, server_default=func.now())
    edited_by = Column(ForeignKey('user.id', ondelete='SET NULL'))
    text = Column(Text, nullable=False)


class AnswerLike(Base):
    __tablename__ = 'answer_like'

    answer_id = Column(ForeignKey('answer.id', ondelete='CASCADE'), primary_key=True)
    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), primary_key=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
