from typing import List
from pydantic import BaseModel, Field

from coursesite_backend.interface.entries import EntryContext
from coursesite_backend.interface.users import UserContext


class CourseContext(BaseModel):
    course_id: int
    title: str
    code: str
    can_view: bool
    can_edit: bool
    entries: List[EntryContext] = Field(default_factory=list, description="Only filled in when the viewer can view the course")
    professors: List[UserContext] = Field(default_factory=list)
    students: List[UserContext] = Field(default_factory=list)


class CourseCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    code: str = Field(min_length=1, max_length=255)


class CourseUpdate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    code: str = Field(min_length=1, max_length=255)


class CourseMembersAdd(BaseModel):
    emails: str = Field(description="Comma separated list of email addresses")


class CourseMemberRoleUpdate(BaseModel):
    professor: bool = False
