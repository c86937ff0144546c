import math
from datetime import date
from typing import Optional


def progress_percentage(completed: int, total: int) -> int:
    """
    Integer completion percentage in [0, 100].

    Rounds half up so 2.5% -> 3%, and never divides by zero.
    """
    if not total or total <= 0:
        return 0
    completed = max(0, min(completed or 0, total))
    return min(100, math.floor(100 * completed / total + 0.5))


def watch_percentage(watch_time: float, duration: float) -> float:
    if not duration or duration <= 0:
        return 0.0
    return min((watch_time / duration) * 100, 100.0)


def content_key(content_type: str, content_id: int) -> str:
    """Key stored in Enrollment.completed_lessons, e.g. ``video:12``."""
    return f"{content_type}:{content_id}"


def next_streak(
    current_streak: int, last_activity: Optional[date], today: date
) -> int:
    # same day keeps the streak, the next day extends it, any gap resets it
    if last_activity is None:
        return 1
    diff_days = (today - last_activity).days
    if diff_days <= 0:
        return max(current_streak, 1)
    if diff_days == 1:
        return current_streak + 1
    return 1
