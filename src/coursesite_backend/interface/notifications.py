from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field


class NotificationContext(BaseModel):
    notification_id: int
    created_at: datetime
    has_read: bool
    message: str
    link: str = ""
    image_url: str = ""


class PushTicket(BaseModel):
    host: str
    socket_port: int
    http_host: str
    ticket: Optional[Any] = Field(None, description="Ticket issued by the push relay")
