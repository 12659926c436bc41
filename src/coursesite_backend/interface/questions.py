from datetime import datetime
from typing import List
from pydantic import BaseModel, Field

from coursesite_backend.interface.users import UserContext


class AnswerContext(BaseModel):
    answer_id: int
    question_id: int
    created_at: datetime
    created_by: UserContext
    edited: bool
    edited_at: datetime
    edited_by: UserContext
    text: str
    likes: int = 0
    liked_by: List[UserContext] = Field(default_factory=list)
    liked: bool = Field(False, description="The viewer liked this answer")
    professor_liked: bool = Field(False, description="A course professor liked this answer")
    can_edit: bool = False


class QuestionContext(BaseModel):
    question_id: int
    entry_id: int
    course_id: int
    title: str
    created_at: datetime
    is_private: bool
    is_closed: bool
    can_answer: bool
    can_edit: bool
    answers: List[AnswerContext] = Field(default_factory=list)


class QuestionCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    text: str
    private: bool = False


class QuestionUpdate(BaseModel):
    title: str = Field(min_length=1, max_length=255)


class AnswerCreate(BaseModel):
    text: str


class AnswerUpdate(BaseModel):
    text: str
