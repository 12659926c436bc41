from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from coursesite_backend.interface.attachments import AttachmentContext
from coursesite_backend.interface.questions import QuestionContext
from coursesite_backend.interface.users import UserContext


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored times are naive UTC; convert an offset-aware time to that."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class EntryContext(BaseModel):
    entry_id: int
    course_id: int
    created_by: UserContext
    created_at: datetime
    title: str
    description: str
    display_at: datetime
    due_at: Optional[datetime] = Field(None, description="None when the entry has no due time")
    visible: bool
    is_important: bool = Field(description="Due soon or displayed today")
    can_edit: bool
    questions: List[QuestionContext] = Field(default_factory=list)
    attachments: List[AttachmentContext] = Field(default_factory=list)


class EntryCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""


class EntryUpdate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    due_at: Optional[datetime] = None
    display_at: datetime
    visible: bool = False

    @field_validator('due_at', 'display_at')
    @classmethod
    def validate_times(cls, v):
        return as_naive_utc(v)
