"""
Meeting room helpers for live classes.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import quote


def to_naive_utc(value: datetime) -> datetime:
    """Stored timestamps are naive UTC; aware inputs are converted first."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def new_room_name(course_id: int) -> str:
    return f"academy-{course_id}-{secrets.token_hex(6)}"


def meeting_url(domain: str, room_name: str, display_name: str) -> str:
    return (
        f"https://{domain}/{room_name}"
        f"#config.prejoinPageEnabled=false"
        f"&config.startWithAudioMuted=true"
        f"&config.startWithVideoMuted=true"
        f'&userInfo.displayName="{quote(display_name)}"'
    )


def ends_at(scheduled_at: datetime, duration: int) -> datetime:
    return to_naive_utc(scheduled_at) + timedelta(minutes=duration or 0)


def join_blocked_reason(
    status: str,
    scheduled_at: datetime,
    duration: int,
    window_minutes: int,
    now: Optional[datetime] = None,
) -> Optional[str]:
    """
    Why a student cannot join right now, or None when the room is open.

    A scheduled class opens ``window_minutes`` before its start and closes
    when its duration has passed. A live class is always open.
    """
    if status == "cancelled":
        return "Live class was cancelled"
    if status == "ended":
        return "Live class has ended"
    if status == "live":
        return None

    now = to_naive_utc(now or datetime.utcnow())
    start = to_naive_utc(scheduled_at)
    if now < start - timedelta(minutes=window_minutes):
        return "Live class has not started yet"
    if now > ends_at(start, duration):
        return "Live class has ended"
    return None
