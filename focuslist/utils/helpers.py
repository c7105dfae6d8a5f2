"""
General helper utilities - pure functions, no database access
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

MINUTE = timedelta(minutes=1)
HOUR = timedelta(hours=1)
DAY = timedelta(days=1)
WEEK = timedelta(weeks=1)


def utcnow() -> datetime:
    """Current time as a naive UTC datetime (the form stored in the database)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize an incoming datetime to naive UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def is_overdue(due_date: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if due_date is None:
        return False
    return due_date < (now or utcnow())


def completion_rate(completed: int, total: int) -> int:
    """Whole-number completion percentage, 0 for an empty list"""
    if total == 0:
        return 0
    return round(completed / total * 100)


def get_relative_time_string(timestamp: datetime, base_time: Optional[datetime] = None) -> str:
    """Human readable distance, e.g. "2 hours ago" or "in 3 days" """
    diff = timestamp - (base_time or utcnow())
    is_past = diff <= timedelta(0)
    abs_diff = abs(diff)

    if abs_diff < MINUTE:
        return "just now" if is_past else "in a moment"

    if abs_diff < HOUR:
        value, unit = abs_diff // MINUTE, "minute"
    elif abs_diff < DAY:
        value, unit = abs_diff // HOUR, "hour"
    elif abs_diff < WEEK:
        value, unit = abs_diff // DAY, "day"
    else:
        value, unit = abs_diff // WEEK, "week"

    if value != 1:
        unit += "s"
    return f"{value} {unit} ago" if is_past else f"in {value} {unit}"


def format_activity_action(action: str, changes: Optional[Dict[str, Any]] = None) -> str:
    """Describe an activity record for display"""
    changes = changes or {}
    if action == "created":
        return "Created task"
    if action == "updated":
        return "Updated task"
    if action == "completed":
        return "Completed task"
    if action == "deleted":
        return "Deleted task"
    if action in ("status_changed", "priority_changed"):
        noun = "status" if action == "status_changed" else "priority"
        if changes.get("from") and changes.get("to"):
            return f"Changed {noun} from {changes['from']} to {changes['to']}"
        return f"Changed {noun}"
    return action
