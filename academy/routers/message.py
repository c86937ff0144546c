# academy/routers/message.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from academy.core.database import get_db
from academy.core.dependencies import get_current_admin, get_current_user
from academy.models.admin import Admin
from academy.models.user import User
from academy.schemas.message import (
    AdminMessageCreate,
    MessageCategory,
    MessageCreate,
    MessageListResponse,
    MessageResponse,
    MessageStatus,
    MessageStatusUpdate,
    MessageThreadResponse,
    ReplyCreate,
    ReplyResponse,
)
from academy.services.message import MessageService

router = APIRouter(
    prefix="/messages",
    tags=["Messages"],
    responses={404: {"description": "Not found"}},
)


# ==================== Admin Endpoints ====================


@router.post("/admin", response_model=MessageResponse, status_code=201)
def send_message_to_user(
    message_in: AdminMessageCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return MessageService(db).send_to_user(current_admin.id, message_in)


@router.get("/admin", response_model=MessageListResponse)
def list_all_messages(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    user_id: Optional[int] = Query(None),
    status: Optional[MessageStatus] = Query(None),
    category: Optional[MessageCategory] = Query(None),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    """All threads, optionally for a single student."""
    messages, pagination = MessageService(db).list_messages(
        page=page, size=size, user_id=user_id, status=status, category=category
    )
    return {"messages": messages, **pagination}


@router.get("/admin/{message_id}", response_model=MessageThreadResponse)
def get_message_as_admin(
    message_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return MessageService(db).get_admin_thread(message_id)


@router.post(
    "/admin/{message_id}/replies", response_model=ReplyResponse, status_code=201
)
def reply_as_admin(
    message_id: int,
    reply_in: ReplyCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return MessageService(db).reply_as_admin(
        current_admin.id, message_id, reply_in.message
    )


@router.patch("/admin/{message_id}/status", response_model=MessageResponse)
def update_message_status(
    message_id: int,
    status_in: MessageStatusUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return MessageService(db).update_status(message_id, status_in.status)


# ==================== Student Endpoints ====================


@router.post("/", response_model=MessageResponse, status_code=201)
def send_message_to_admins(
    message_in: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return MessageService(db).send_to_admins(current_user.id, message_in)


@router.get("/", response_model=MessageListResponse)
def list_my_messages(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    status: Optional[MessageStatus] = Query(None),
    category: Optional[MessageCategory] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    messages, pagination = MessageService(db).list_messages(
        page=page,
        size=size,
        user_id=current_user.id,
        status=status,
        category=category,
    )
    return {"messages": messages, **pagination}


@router.get("/{message_id}", response_model=MessageThreadResponse)
def get_my_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return MessageService(db).get_user_thread(current_user.id, message_id)


@router.post("/{message_id}/replies", response_model=ReplyResponse, status_code=201)
def reply_to_message(
    message_id: int,
    reply_in: ReplyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return MessageService(db).reply_as_user(
        current_user.id, message_id, reply_in.message
    )
