"""
Task activity API endpoints - read access to the audit trail
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel

from focuslist.database import get_db
from focuslist.models.user import User
from focuslist.models.task_activity import TaskActivity, ActivityAction, ActivityChange
from focuslist.db import tasks as tasks_db
from focuslist.db import task_activity as activity_db
from focuslist.api.auth import get_current_user
from focuslist.api.errors import NotFoundError, enforce_rate_limit, require_owned, require_valid
from focuslist.api.responses import DeletedCountResponse
from focuslist.services.rate_limiter import RateLimiter, get_rate_limiter
from focuslist.utils.helpers import utcnow, format_activity_action, get_relative_time_string

router = APIRouter()


class ActivityResponse(BaseModel):
    id: int
    task_id: int
    user_id: int
    action: ActivityAction
    changes: Optional[ActivityChange] = None
    created_at: datetime
    summary: str
    relative_time: str


def build_activity_response(activity: TaskActivity, now: Optional[datetime] = None) -> ActivityResponse:
    return ActivityResponse(
        id=activity.id,
        task_id=activity.task_id,
        user_id=activity.user_id,
        action=activity.action,
        changes=activity.changes,
        created_at=activity.created_at,
        summary=format_activity_action(activity.action.value, activity.changes),
        relative_time=get_relative_time_string(activity.created_at, now),
    )


@router.get("/task/{task_id}", response_model=List[ActivityResponse])
async def list_activity_for_task(
    task_id: int,
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    History of a task, newest first.

    Still answers after the task has been deleted, as long as the caller
    has records for it.
    """
    task = await tasks_db.get_task_by_id(db, task_id)
    if task is not None:
        require_owned(task, current_user, "task", "view activity for")
        activities = await activity_db.get_task_activity_by_task(db, task_id, limit=limit)
    else:
        activities = await activity_db.get_task_activity_by_task(
            db, task_id, limit=limit, user_id=current_user.id
        )
        if not activities:
            raise NotFoundError("Task not found")

    now = utcnow()
    return [build_activity_response(a, now) for a in activities]


@router.get("/recent", response_model=List[ActivityResponse])
async def list_recent_activity(
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    now = utcnow()
    activities = await activity_db.get_recent_activity_by_user(db, current_user.id, limit)
    return [build_activity_response(a, now) for a in activities]


@router.get("/{activity_id}", response_model=ActivityResponse)
async def get_activity(
    activity_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    activity = require_owned(
        await activity_db.get_task_activity_by_id(db, activity_id),
        current_user, "activity", "view",
    )
    return build_activity_response(activity)


@router.delete("/task/{task_id}", response_model=DeletedCountResponse)
async def purge_activity_for_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    """Drop the caller's history for a task that has already been deleted"""
    await enforce_rate_limit(limiter, "deleteTask", current_user)

    task = await tasks_db.get_task_by_id(db, task_id)
    if task is not None:
        require_owned(task, current_user, "task", "purge activity for")
        require_valid(["Task still exists"])

    deleted_count = await activity_db.delete_task_activity_by_task(db, task_id, current_user.id)
    if deleted_count == 0:
        raise NotFoundError("Task not found")

    await db.commit()
    return DeletedCountResponse(deleted_count=deleted_count)
