"""
Task API endpoints - user-scoped CRUD with an audit trail
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, List, Optional, Tuple, Union
from datetime import datetime
from pydantic import BaseModel, field_validator

from focuslist.database import get_db
from focuslist.models.user import User
from focuslist.models.task import Task, TaskStatus, TaskPriority
from focuslist.models.task_activity import ActivityAction, StatusChange, PriorityChange, FieldsChange
from focuslist.db import tasks as tasks_db
from focuslist.db import task_activity as activity_db
from focuslist.db import task_comments as comments_db
from focuslist.api.auth import get_current_user
from focuslist.api.errors import enforce_rate_limit, require_owned, require_valid
from focuslist.api.responses import IdResponse, SuccessResponse, DeletedCountResponse
from focuslist.services.rate_limiter import RateLimiter, get_rate_limiter
from focuslist.utils.helpers import utcnow, to_naive_utc, is_overdue, completion_rate
from focuslist.utils.validators import validate_task_input, validate_positions
from focuslist.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()


# --- Pydantic Schemas ---

class TaskResponse(BaseModel):
    id: int
    user_id: int
    title: str
    description: Optional[str]
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime]
    completed_at: Optional[datetime]
    position: int
    tags: Optional[List[str]]
    created_at: datetime
    updated_at: datetime
    is_overdue: bool = False


class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, value):
        return to_naive_utc(value)


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, value):
        return to_naive_utc(value)


class PositionUpdate(BaseModel):
    id: int
    position: int


class ReorderRequest(BaseModel):
    updates: List[PositionUpdate]


class TaskStats(BaseModel):
    total: int
    pending: int
    in_progress: int
    completed: int
    overdue: int
    completion_rate: int


# --- Helpers ---

def build_task_response(task: Task, now: Optional[datetime] = None) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        user_id=task.user_id,
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        due_date=task.due_date,
        completed_at=task.completed_at,
        position=task.position,
        tags=task.tags,
        created_at=task.created_at,
        updated_at=task.updated_at,
        is_overdue=task.status != TaskStatus.COMPLETED and is_overdue(task.due_date, now),
    )


async def build_task_stats(db: AsyncSession, user_id: int) -> TaskStats:
    """Counts per status, overdue count and completion percentage"""
    pending = await tasks_db.get_task_count_by_user_and_status(db, user_id, TaskStatus.PENDING)
    in_progress = await tasks_db.get_task_count_by_user_and_status(db, user_id, TaskStatus.IN_PROGRESS)
    completed = await tasks_db.get_task_count_by_user_and_status(db, user_id, TaskStatus.COMPLETED)
    overdue = await tasks_db.get_overdue_tasks_by_user(db, user_id, utcnow())

    total = pending + in_progress + completed
    return TaskStats(
        total=total,
        pending=pending,
        in_progress=in_progress,
        completed=completed,
        overdue=len(overdue),
        completion_rate=completion_rate(completed, total),
    )


def describe_task_update(
    task: Task,
    updates: Dict[str, Any],
) -> Tuple[ActivityAction, Union[StatusChange, PriorityChange, FieldsChange]]:
    """
    Pick the single audit entry for an update, judged against the task's
    state before the update is applied.

    Completion wins over a plain status change, which wins over a priority
    change; anything else is a generic update listing the changed fields.
    """
    new_status = updates.get("status")
    if new_status is not None and new_status != task.status:
        change = StatusChange(from_=task.status, to=new_status)
        if new_status == TaskStatus.COMPLETED:
            return ActivityAction.COMPLETED, change
        return ActivityAction.STATUS_CHANGED, change

    new_priority = updates.get("priority")
    if new_priority is not None and new_priority != task.priority:
        return ActivityAction.PRIORITY_CHANGED, PriorityChange(from_=task.priority, to=new_priority)

    changed = sorted(key for key, value in updates.items() if getattr(task, key) != value)
    return ActivityAction.UPDATED, FieldsChange(fields=changed)


# --- Queries ---

@router.get("/", response_model=List[TaskResponse])
async def list_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """All of the caller's tasks, newest first"""
    now = utcnow()
    tasks = await tasks_db.get_tasks_by_user(db, current_user.id)
    return [build_task_response(t, now) for t in tasks]


@router.get("/status/{status}", response_model=List[TaskResponse])
async def list_tasks_by_status(
    status: TaskStatus,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    now = utcnow()
    tasks = await tasks_db.get_tasks_by_user_and_status(db, current_user.id, status)
    return [build_task_response(t, now) for t in tasks]


@router.get("/by-position", response_model=List[TaskResponse])
async def list_tasks_by_position(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Tasks in manual order"""
    now = utcnow()
    tasks = await tasks_db.get_tasks_by_user_and_position(db, current_user.id)
    return [build_task_response(t, now) for t in tasks]


@router.get("/overdue", response_model=List[TaskResponse])
async def list_overdue_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    now = utcnow()
    tasks = await tasks_db.get_overdue_tasks_by_user(db, current_user.id, now)
    return [build_task_response(t, now) for t in tasks]


@router.get("/stats", response_model=TaskStats)
async def get_task_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await build_task_stats(db, current_user.id)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task = require_owned(await tasks_db.get_task_by_id(db, task_id), current_user, "task", "view")
    return build_task_response(task)


# --- Mutations ---

@router.post("/", response_model=IdResponse)
async def create_task(
    data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    """Create a task at the end of the caller's manual ordering"""
    await enforce_rate_limit(limiter, "createTask", current_user)

    require_valid(validate_task_input(
        title=data.title,
        description=data.description,
        due_date=data.due_date,
        tags=data.tags,
    ))

    max_position = await tasks_db.get_max_position_for_user(db, current_user.id)
    task = await tasks_db.create_task(
        db,
        user_id=current_user.id,
        title=data.title,
        description=data.description,
        priority=data.priority,
        due_date=data.due_date,
        tags=data.tags,
        position=max_position + 1,
    )
    await activity_db.create_task_activity(db, task.id, current_user.id, ActivityAction.CREATED)

    await db.commit()
    return IdResponse(id=task.id)


@router.post("/reorder", response_model=SuccessResponse)
async def reorder_tasks(
    data: ReorderRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    """Batch position update; every task is checked before any position is written"""
    await enforce_rate_limit(limiter, "batchUpdatePositions", current_user)

    pairs = []
    for item in data.updates:
        task = require_owned(
            await tasks_db.get_task_by_id(db, item.id),
            current_user, "task", "reorder", label=f"task {item.id}",
        )
        pairs.append((task, item.position))

    require_valid(validate_positions(position for _, position in pairs))

    await tasks_db.batch_update_task_positions(db, pairs)
    await db.commit()
    return SuccessResponse()


@router.delete("/completed", response_model=DeletedCountResponse)
async def delete_completed_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    """Remove every completed task the caller owns"""
    await enforce_rate_limit(limiter, "deleteTask", current_user)

    completed = await tasks_db.get_completed_tasks_by_user(db, current_user.id)
    for task in completed:
        await activity_db.create_task_activity(db, task.id, current_user.id, ActivityAction.DELETED)
        await comments_db.delete_task_comments_by_task(db, task.id)
    deleted_count = await tasks_db.delete_tasks(db, completed)

    await db.commit()
    logger.info(f"User {current_user.id} cleared {deleted_count} completed task(s)")
    return DeletedCountResponse(deleted_count=deleted_count)


@router.patch("/{task_id}", response_model=IdResponse)
async def update_task(
    task_id: int,
    data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    """Partial update; keeps completed_at in step with status"""
    await enforce_rate_limit(limiter, "updateTask", current_user)

    task = require_owned(await tasks_db.get_task_by_id(db, task_id), current_user, "task", "update")

    updates = data.model_dump(exclude_none=True)
    require_valid(validate_task_input(
        title=updates.get("title"),
        description=updates.get("description"),
        due_date=updates.get("due_date"),
        tags=updates.get("tags"),
    ))

    action, change = describe_task_update(task, updates)

    new_status = updates.get("status")
    if new_status == TaskStatus.COMPLETED and task.status != TaskStatus.COMPLETED:
        updates["completed_at"] = utcnow()
    elif new_status is not None and new_status != TaskStatus.COMPLETED:
        updates["completed_at"] = None

    await tasks_db.update_task(db, task, updates)
    await activity_db.create_task_activity(db, task.id, current_user.id, action, change)

    await db.commit()
    return IdResponse(id=task.id)


@router.post("/{task_id}/complete", response_model=IdResponse)
async def complete_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    """Mark a task as completed"""
    await enforce_rate_limit(limiter, "updateTask", current_user)

    task = require_owned(await tasks_db.get_task_by_id(db, task_id), current_user, "task", "complete")

    previous_status = task.status
    await tasks_db.complete_task(db, task)
    await activity_db.create_task_activity(
        db, task.id, current_user.id, ActivityAction.COMPLETED,
        StatusChange(from_=previous_status, to=TaskStatus.COMPLETED),
    )

    await db.commit()
    return IdResponse(id=task.id)


@router.delete("/{task_id}", response_model=SuccessResponse)
async def delete_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    """Delete a task and its comments; its activity history is kept"""
    await enforce_rate_limit(limiter, "deleteTask", current_user)

    task = require_owned(await tasks_db.get_task_by_id(db, task_id), current_user, "task", "delete")

    # Logged first so the record references a task that still exists
    await activity_db.create_task_activity(db, task.id, current_user.id, ActivityAction.DELETED)
    await comments_db.delete_task_comments_by_task(db, task.id)
    await tasks_db.delete_task(db, task)

    await db.commit()
    return SuccessResponse()
