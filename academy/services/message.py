# academy/services/message.py
"""
Messages between students and the platform admins.

A thread has a subject, an opening message and any number of replies.
Either side can open a thread; the other side's first view marks it read
and every reply marks it replied until an admin resolves it.
"""

import logging
import math
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from academy.core.decorator import NotFoundException
from academy.models.message import AdminMessage, AdminMessageReply
from academy.models.user import User
from academy.schemas.message import AdminMessageCreate, MessageCreate

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== Student ====================

    def send_to_admins(self, user_id: int, message_in: MessageCreate) -> AdminMessage:
        message = AdminMessage(
            user_id=user_id,
            is_from_admin=False,
            status="unread",
            **message_in.model_dump(),
        )
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        logger.info(f"User {user_id} opened message {message.id}")
        return message

    def get_user_thread(self, user_id: int, message_id: int) -> dict:
        message = self._get_message(message_id)
        if message.user_id != user_id:
            raise NotFoundException("Message not found")
        if message.is_from_admin:
            self._mark_read(message)
        return self._thread(message)

    def reply_as_user(self, user_id: int, message_id: int, text: str) -> AdminMessageReply:
        message = self._get_message(message_id)
        if message.user_id != user_id:
            raise NotFoundException("Message not found")
        return self._add_reply(message, text, user_id=user_id)

    # ==================== Admin ====================

    def send_to_user(self, admin_id: int, message_in: AdminMessageCreate) -> AdminMessage:
        if not self.db.get(User, message_in.user_id):
            raise NotFoundException("User not found")

        message = AdminMessage(
            admin_id=admin_id,
            is_from_admin=True,
            status="unread",
            **message_in.model_dump(),
        )
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        logger.info(f"Admin {admin_id} messaged user {message.user_id}")
        return message

    def get_admin_thread(self, message_id: int) -> dict:
        message = self._get_message(message_id)
        if not message.is_from_admin:
            self._mark_read(message)
        return self._thread(message)

    def reply_as_admin(self, admin_id: int, message_id: int, text: str) -> AdminMessageReply:
        message = self._get_message(message_id)
        return self._add_reply(message, text, admin_id=admin_id)

    def update_status(self, message_id: int, status: str) -> AdminMessage:
        message = self._get_message(message_id)
        message.status = status
        self.db.commit()
        self.db.refresh(message)
        return message

    # ==================== Listing ====================

    def list_messages(
        self,
        page: int = 1,
        size: int = 20,
        user_id: Optional[int] = None,
        status: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Tuple[List[dict], dict]:
        """Newest first; ``user_id`` limits the list to one student's threads."""
        query = self.db.query(AdminMessage)
        if user_id is not None:
            query = query.filter(AdminMessage.user_id == user_id)
        if status:
            query = query.filter(AdminMessage.status == status)
        if category:
            query = query.filter(AdminMessage.category == category)

        total = query.count()

        offset = (page - 1) * size
        messages = (
            query.order_by(AdminMessage.created_at.desc(), AdminMessage.id.desc())
            .offset(offset)
            .limit(size)
            .all()
        )

        counts = self._reply_counts([m.id for m in messages])
        total_pages = math.ceil(total / size) if size > 0 else 0
        pagination = {
            "total": total,
            "page": page,
            "size": size,
            "total_pages": total_pages,
        }
        return [self._to_dict(m, counts.get(m.id, 0)) for m in messages], pagination

    # ==================== Helpers ====================

    def _get_message(self, message_id: int) -> AdminMessage:
        message = self.db.get(AdminMessage, message_id)
        if not message:
            raise NotFoundException("Message not found")
        return message

    def _mark_read(self, message: AdminMessage) -> None:
        if message.status == "unread":
            message.status = "read"
            self.db.commit()
            self.db.refresh(message)

    def _add_reply(
        self,
        message: AdminMessage,
        text: str,
        user_id: Optional[int] = None,
        admin_id: Optional[int] = None,
    ) -> AdminMessageReply:
        reply = AdminMessageReply(
            message_id=message.id,
            user_id=user_id,
            admin_id=admin_id,
            is_from_admin=admin_id is not None,
            message=text,
        )
        self.db.add(reply)
        message.status = "replied"
        message.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(reply)
        return reply

    def _replies(self, message_id: int) -> List[AdminMessageReply]:
        return (
            self.db.query(AdminMessageReply)
            .filter(AdminMessageReply.message_id == message_id)
            .order_by(AdminMessageReply.created_at.asc(), AdminMessageReply.id.asc())
            .all()
        )

    def _reply_counts(self, message_ids: List[int]) -> Dict[int, int]:
        if not message_ids:
            return {}
        rows = (
            self.db.query(AdminMessageReply.message_id, func.count(AdminMessageReply.id))
            .filter(AdminMessageReply.message_id.in_(message_ids))
            .group_by(AdminMessageReply.message_id)
            .all()
        )
        return dict(rows)

    def _thread(self, message: AdminMessage) -> dict:
        replies = self._replies(message.id)
        data = self._to_dict(message, len(replies))
        data["replies"] = replies
        return data

    @staticmethod
    def _to_dict(message: AdminMessage, reply_count: int) -> dict:
        return {
            "id": message.id,
            "user_id": message.user_id,
            "admin_id": message.admin_id,
            "subject": message.subject,
            "message": message.message,
            "priority": message.priority,
            "category": message.category,
            "status": message.status,
            "is_from_admin": message.is_from_admin,
            "created_at": message.created_at,
            "updated_at": message.updated_at,
            "reply_count": reply_count,
        }
