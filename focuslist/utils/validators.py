"""
Input validation utilities.

Each rule is a predicate; the validate_* functions collect every failing
rule so the caller can report them together.
"""
from datetime import datetime
from types import MappingProxyType
from typing import Iterable, List, Optional

from focuslist.utils.helpers import utcnow

VALIDATION_LIMITS = MappingProxyType({
    "task_title_max": 200,
    "task_description_max": 2000,
    "task_tags_max": 10,
    "task_tag_length_max": 50,
    "comment_content_max": 1000,
    "message_content_max": 10000,
    "thread_title_max": 100,
})


def is_valid_task_title(title: str) -> bool:
    return len(title.strip()) > 0 and len(title) <= VALIDATION_LIMITS["task_title_max"]


def is_valid_task_description(description: Optional[str]) -> bool:
    if not description:
        return True
    return len(description) <= VALIDATION_LIMITS["task_description_max"]


def is_valid_due_date(due_date: datetime, allow_past: bool = False) -> bool:
    """Due dates must lie in the future unless explicitly allowed"""
    return allow_past or due_date >= utcnow()


def is_valid_task_tags(tags: Optional[List[str]]) -> bool:
    if tags is None:
        return True
    if len(tags) > VALIDATION_LIMITS["task_tags_max"]:
        return False
    return all(
        len(tag.strip()) > 0 and len(tag) <= VALIDATION_LIMITS["task_tag_length_max"]
        for tag in tags
    )


def is_valid_comment_content(content: str) -> bool:
    return len(content.strip()) > 0 and len(content) <= VALIDATION_LIMITS["comment_content_max"]


def is_valid_message_content(content: str) -> bool:
    return len(content.strip()) > 0 and len(content) <= VALIDATION_LIMITS["message_content_max"]


def is_valid_thread_title(title: Optional[str]) -> bool:
    if not title:
        return True
    return len(title) <= VALIDATION_LIMITS["thread_title_max"]


def is_valid_position(position: int) -> bool:
    return isinstance(position, int) and position >= 0


def validate_task_input(
    title: Optional[str] = None,
    description: Optional[str] = None,
    due_date: Optional[datetime] = None,
    tags: Optional[List[str]] = None,
) -> List[str]:
    """Return every violated task rule; fields left as None are not checked"""
    errors = []

    if title is not None and not is_valid_task_title(title):
        errors.append("Title must be between 1 and 200 characters")

    if not is_valid_task_description(description):
        errors.append("Description must be max 2000 characters")

    if due_date is not None and not is_valid_due_date(due_date):
        errors.append("Due date must be in the future")

    if not is_valid_task_tags(tags):
        errors.append("Tags must be max 50 characters each, max 10 tags")

    return errors


def validate_positions(positions: Iterable[int]) -> List[str]:
    if all(is_valid_position(p) for p in positions):
        return []
    return ["Position must be a non-negative integer"]
