"""
Unit tests for validation rules and pure helpers
"""
from datetime import datetime, timedelta, timezone

from focuslist.utils.helpers import (
    utcnow, to_naive_utc, is_overdue, completion_rate,
    get_relative_time_string, format_activity_action,
)
from focuslist.utils.validators import (
    is_valid_task_title, is_valid_task_description, is_valid_due_date, is_valid_task_tags,
    is_valid_comment_content, is_valid_message_content, is_valid_thread_title, is_valid_position,
    validate_task_input, validate_positions,
)


# ===================== VALIDATORS =====================


class TestTaskRules:

    def test_title_bounds(self):
        assert is_valid_task_title("a")
        assert is_valid_task_title("a" * 200)
        assert not is_valid_task_title("a" * 201)
        assert not is_valid_task_title("")
        assert not is_valid_task_title("   ")

    def test_description(self):
        assert is_valid_task_description(None)
        assert is_valid_task_description("x" * 2000)
        assert not is_valid_task_description("x" * 2001)

    def test_due_date(self):
        assert is_valid_due_date(utcnow() + timedelta(minutes=5))
        assert not is_valid_due_date(utcnow() - timedelta(minutes=5))
        assert is_valid_due_date(utcnow() - timedelta(days=1), allow_past=True)

    def test_tags(self):
        assert is_valid_task_tags(None)
        assert is_valid_task_tags([])
        assert is_valid_task_tags(["t"] * 10)
        assert not is_valid_task_tags(["t"] * 11)
        assert not is_valid_task_tags(["x" * 51])
        assert not is_valid_task_tags([""])

    def test_validate_task_input_collects_all(self):
        errors = validate_task_input(
            title="",
            description="x" * 2001,
            due_date=utcnow() - timedelta(days=1),
            tags=["t"] * 11,
        )
        assert errors == [
            "Title must be between 1 and 200 characters",
            "Description must be max 2000 characters",
            "Due date must be in the future",
            "Tags must be max 50 characters each, max 10 tags",
        ]

    def test_validate_task_input_skips_missing_fields(self):
        assert validate_task_input() == []
        assert validate_task_input(title="Buy milk") == []


class TestOtherRules:

    def test_comment_content(self):
        assert is_valid_comment_content("ok")
        assert not is_valid_comment_content(" ")
        assert not is_valid_comment_content("x" * 1001)

    def test_message_content(self):
        assert is_valid_message_content("x" * 10000)
        assert not is_valid_message_content("x" * 10001)
        assert not is_valid_message_content("")

    def test_thread_title(self):
        assert is_valid_thread_title(None)
        assert is_valid_thread_title("x" * 100)
        assert not is_valid_thread_title("x" * 101)

    def test_positions(self):
        assert is_valid_position(0)
        assert not is_valid_position(-1)
        assert validate_positions([0, 3, 7]) == []
        assert validate_positions([1, -2]) == ["Position must be a non-negative integer"]


# ===================== HELPERS =====================


class TestHelpers:

    def test_to_naive_utc(self):
        aware = datetime(2025, 3, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_naive_utc(aware) == datetime(2025, 3, 1, 10, 0)
        naive = datetime(2025, 3, 1, 12, 0)
        assert to_naive_utc(naive) is naive
        assert to_naive_utc(None) is None

    def test_is_overdue(self):
        now = datetime(2025, 1, 10)
        assert is_overdue(datetime(2025, 1, 9), now)
        assert not is_overdue(datetime(2025, 1, 11), now)
        assert not is_overdue(None, now)

    def test_completion_rate(self):
        assert completion_rate(0, 0) == 0
        assert completion_rate(1, 1) == 100
        assert completion_rate(1, 3) == 33
        assert completion_rate(2, 3) == 67

    def test_relative_time(self):
        base = datetime(2025, 1, 10, 12, 0)
        assert get_relative_time_string(base - timedelta(seconds=10), base) == "just now"
        assert get_relative_time_string(base - timedelta(minutes=1), base) == "1 minute ago"
        assert get_relative_time_string(base - timedelta(hours=3), base) == "3 hours ago"
        assert get_relative_time_string(base - timedelta(days=2), base) == "2 days ago"
        assert get_relative_time_string(base - timedelta(weeks=3), base) == "3 weeks ago"
        assert get_relative_time_string(base + timedelta(days=1), base) == "in 1 day"
        assert get_relative_time_string(base + timedelta(seconds=5), base) == "in a moment"

    def test_format_activity_action(self):
        assert format_activity_action("created") == "Created task"
        assert format_activity_action("deleted") == "Deleted task"
        assert format_activity_action(
            "priority_changed", {"kind": "priority", "from": "low", "to": "high"}
        ) == "Changed priority from low to high"
        assert format_activity_action("status_changed") == "Changed status"
