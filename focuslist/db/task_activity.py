"""
Record access: task activity (audit trail).

Records are inserted and read, never modified. Removal only happens in
bulk for a task via delete_task_activity_by_task.
"""
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from focuslist.models.task_activity import (
    TaskActivity, ActivityAction, StatusChange, PriorityChange, FieldsChange, dump_change,
)
from focuslist.utils.helpers import utcnow


async def create_task_activity(
    db: AsyncSession,
    task_id: int,
    user_id: int,
    action: ActivityAction,
    changes: Optional[Union[StatusChange, PriorityChange, FieldsChange]] = None,
) -> TaskActivity:
    activity = TaskActivity(
        task_id=task_id,
        user_id=user_id,
        action=action,
        changes=dump_change(changes),
        created_at=utcnow(),
    )
    db.add(activity)
    await db.flush()
    return activity


async def get_task_activity_by_id(db: AsyncSession, activity_id: int) -> Optional[TaskActivity]:
    return await db.get(TaskActivity, activity_id)


async def get_task_activity_by_task(
    db: AsyncSession,
    task_id: int,
    limit: Optional[int] = None,
    user_id: Optional[int] = None,
) -> List[TaskActivity]:
    """Activity for a task, newest first, optionally only one user's records"""
    query = select(TaskActivity).where(TaskActivity.task_id == task_id)
    if user_id is not None:
        query = query.where(TaskActivity.user_id == user_id)
    query = query.order_by(TaskActivity.created_at.desc(), TaskActivity.id.desc())
    if limit:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_task_activity_by_user(db: AsyncSession, user_id: int) -> List[TaskActivity]:
    result = await db.execute(
        select(TaskActivity).where(TaskActivity.user_id == user_id).order_by(TaskActivity.id.desc())
    )
    return list(result.scalars().all())


async def get_recent_activity_by_user(db: AsyncSession, user_id: int, limit: int = 20) -> List[TaskActivity]:
    result = await db.execute(
        select(TaskActivity)
        .where(TaskActivity.user_id == user_id)
        .order_by(TaskActivity.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def delete_task_activity_by_task(db: AsyncSession, task_id: int, user_id: int) -> int:
    activities = await get_task_activity_by_task(db, task_id, user_id=user_id)
    for activity in activities:
        await db.delete(activity)
    await db.flush()
    return len(activities)
