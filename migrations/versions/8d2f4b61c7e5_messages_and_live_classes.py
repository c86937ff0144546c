"""messages and live classes

Revision ID: 8d2f4b61c7e5
Revises: 3a7c1e9b2d40
Create Date: 2026-10-18 16:40:09.127733

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8d2f4b61c7e5"
down_revision: Union[str, None] = "3a7c1e9b2d40"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at():
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )


def _updated_at():
    return sa.Column(
        "updated_at",
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )


def upgrade() -> None:
    # ==================== Admin Messages ====================
    op.create_table(
        "admin_messages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("admin_id", sa.Integer(), sa.ForeignKey("admins.id"), nullable=True),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False, server_default="normal"),
        sa.Column("category", sa.String(30), nullable=False, server_default="general"),
        sa.Column("status", sa.String(20), nullable=False, server_default="unread"),
        sa.Column(
            "is_from_admin", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_admin_messages_id", "admin_messages", ["id"])
    op.create_index("ix_admin_messages_user_id", "admin_messages", ["user_id"])
    op.create_index("ix_admin_messages_status", "admin_messages", ["status"])

    op.create_table(
        "admin_message_replies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "message_id",
            sa.Integer(),
            sa.ForeignKey("admin_messages.id"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("admin_id", sa.Integer(), sa.ForeignKey("admins.id"), nullable=True),
        sa.Column(
            "is_from_admin", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("message", sa.Text(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_admin_message_replies_id", "admin_message_replies", ["id"])
    op.create_index(
        "ix_admin_message_replies_message_id", "admin_message_replies", ["message_id"]
    )

    # ==================== Live Classes ====================
    op.create_table(
        "live_classes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.id"), nullable=False),
        sa.Column("chapter_id", sa.Integer(), sa.ForeignKey("chapters.id"), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("admins.id"), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("room_name", sa.String(100), nullable=False, unique=True),
        sa.Column("max_participants", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("is_recorded", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("recording_url", sa.String(500), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_live_classes_id", "live_classes", ["id"])
    op.create_index("ix_live_classes_course_id", "live_classes", ["course_id"])
    op.create_index("ix_live_classes_scheduled_at", "live_classes", ["scheduled_at"])

    op.create_table(
        "live_class_participants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "live_class_id",
            sa.Integer(),
            sa.ForeignKey("live_classes.id"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("join_count", sa.Integer(), nullable=False, server_default="1"),
        sa.UniqueConstraint(
            "live_class_id", "user_id", name="uq_live_class_participant"
        ),
    )
    op.create_index("ix_live_class_participants_id", "live_class_participants", ["id"])
    op.create_index(
        "ix_live_class_participants_live_class_id",
        "live_class_participants",
        ["live_class_id"],
    )
    op.create_index(
        "ix_live_class_participants_user_id", "live_class_participants", ["user_id"]
    )


def downgrade() -> None:
    for table in (
        "live_class_participants",
        "live_classes",
        "admin_message_replies",
        "admin_messages",
    ):
        op.drop_table(table)
