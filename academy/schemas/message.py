# academy/schemas/message.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

MessagePriority = Literal["low", "normal", "high", "urgent"]
MessageCategory = Literal["general", "course", "payment", "technical", "content"]
MessageStatus = Literal["unread", "read", "replied", "resolved"]


class MessageCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    priority: MessagePriority = "normal"
    category: MessageCategory = "general"


class AdminMessageCreate(MessageCreate):
    user_id: int


class ReplyCreate(BaseModel):
    message: str = Field(..., min_length=1)


class MessageStatusUpdate(BaseModel):
    status: MessageStatus


class ReplyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    message_id: int
    user_id: Optional[int] = None
    admin_id: Optional[int] = None
    is_from_admin: bool
    message: str
    created_at: datetime


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    admin_id: Optional[int] = None
    subject: str
    message: str
    priority: str
    category: str
    status: str
    is_from_admin: bool
    created_at: datetime
    updated_at: datetime
    reply_count: int = 0


class MessageThreadResponse(MessageResponse):
    replies: List[ReplyResponse] = []


class MessageListResponse(BaseModel):
    messages: List[MessageResponse]
    total: int
    page: int
    size: int
    total_pages: int
