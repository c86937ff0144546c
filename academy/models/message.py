# academy/models/message.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from academy.core.database import Base


class AdminMessage(Base):
    """
    A conversation between one student and the platform admins.
    Started either by the student or by an admin.
    """

    __tablename__ = "admin_messages"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # admin who started the thread, null when the student wrote first
    admin_id = Column(Integer, ForeignKey("admins.id"), nullable=True)

    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)

    # low, normal, high, urgent
    priority = Column(String(20), default="normal", nullable=False)
    # general, course, payment, technical, content
    category = Column(String(30), default="general", nullable=False)
    # unread, read, replied, resolved
    status = Column(String(20), default="unread", nullable=False, index=True)
    is_from_admin = Column(Boolean, default=False, nullable=False)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<AdminMessage(id={self.id}, user_id={self.user_id}, status='{self.status}')>"


class AdminMessageReply(Base):
    __tablename__ = "admin_message_replies"

    id = Column(Integer, primary_key=True, index=True)
    message_id = Column(
        Integer, ForeignKey("admin_messages.id"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    admin_id = Column(Integer, ForeignKey("admins.id"), nullable=True)
    is_from_admin = Column(Boolean, default=False, nullable=False)
    message = Column(Text, nullable=False)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
