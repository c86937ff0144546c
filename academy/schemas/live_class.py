# academy/schemas/live_class.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class LiveClassCreate(BaseModel):
    course_id: int
    chapter_id: Optional[int] = None
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    scheduled_at: datetime
    duration: int = Field(60, ge=5, le=480)
    max_participants: int = Field(50, ge=1, le=1000)
    is_recorded: bool = False


class LiveClassUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=5, le=480)
    max_participants: Optional[int] = Field(None, ge=1, le=1000)
    is_recorded: Optional[bool] = None
    recording_url: Optional[str] = Field(None, max_length=500)


class LiveClassResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    chapter_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    scheduled_at: datetime
    duration: int
    room_name: str
    max_participants: int
    is_recorded: bool
    recording_url: Optional[str] = None
    status: str
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    created_at: datetime


class LiveClassJoinResponse(BaseModel):
    live_class_id: int
    room_name: str
    domain: str
    meeting_url: str
    display_name: str
    role: Literal["student", "moderator"]


class ParticipantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    joined_at: datetime
    join_count: int


class LiveClassParticipants(BaseModel):
    live_class_id: int
    total: int
    participants: List[ParticipantResponse]
