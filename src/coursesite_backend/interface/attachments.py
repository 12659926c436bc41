from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class AttachmentContext(BaseModel):
    attachment_id: int
    created_by: Optional[int] = Field(None, description="Id of the uploading user")
    created_at: datetime
    size: int = Field(description="Size in bytes")
    name: str
