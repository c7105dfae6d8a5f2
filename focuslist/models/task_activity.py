"""
Task activity model - append-only audit trail of task changes.

task_id is a plain indexed column rather than a foreign key: a "deleted"
record has to stay readable after its task row is gone.
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, JSON, Index, Enum as SQLEnum
from pydantic import BaseModel, Field
from typing import Annotated, List, Literal, Optional, Union
from enum import Enum

from focuslist.database import Base
from focuslist.models.task import TaskStatus, TaskPriority


class ActivityAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    COMPLETED = "completed"
    DELETED = "deleted"
    STATUS_CHANGED = "status_changed"
    PRIORITY_CHANGED = "priority_changed"


# --- Change payloads, one shape per kind of change ---

class StatusChange(BaseModel):
    kind: Literal["status"] = "status"
    from_: TaskStatus = Field(alias="from")
    to: TaskStatus

    class Config:
        populate_by_name = True


class PriorityChange(BaseModel):
    kind: Literal["priority"] = "priority"
    from_: TaskPriority = Field(alias="from")
    to: TaskPriority

    class Config:
        populate_by_name = True


class FieldsChange(BaseModel):
    kind: Literal["fields"] = "fields"
    fields: List[str] = []


ActivityChange = Annotated[
    Union[StatusChange, PriorityChange, FieldsChange],
    Field(discriminator="kind"),
]


class TaskActivity(Base):
    __tablename__ = "task_activity"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    action = Column(SQLEnum(ActivityAction, native_enum=False), nullable=False)
    changes = Column(JSON, nullable=True)  # serialized ActivityChange
    created_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_task_activity_task_created", "task_id", "created_at"),
    )


def dump_change(change: Optional[Union[StatusChange, PriorityChange, FieldsChange]]) -> Optional[dict]:
    """Serialize a change payload for the JSON column"""
    if change is None:
        return None
    return change.model_dump(by_alias=True, mode="json")
