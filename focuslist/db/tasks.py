"""
Record access: tasks.

The only module that queries the tasks table directly. Functions never
authorize, validate or commit; absence is returned as None or [].
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from focuslist.models.task import Task, TaskStatus, TaskPriority
from focuslist.utils.helpers import utcnow


# --- Create ---

async def create_task(
    db: AsyncSession,
    user_id: int,
    title: str,
    position: int,
    description: Optional[str] = None,
    status: TaskStatus = TaskStatus.PENDING,
    priority: Optional[TaskPriority] = None,
    due_date: Optional[datetime] = None,
    tags: Optional[List[str]] = None,
) -> Task:
    now = utcnow()
    task = Task(
        user_id=user_id,
        title=title,
        description=description,
        status=status,
        priority=priority or TaskPriority.MEDIUM,
        due_date=due_date,
        position=position,
        tags=tags,
        created_at=now,
        updated_at=now,
    )
    db.add(task)
    await db.flush()
    return task


# --- Read ---

async def get_task_by_id(db: AsyncSession, task_id: int) -> Optional[Task]:
    return await db.get(Task, task_id)


async def get_tasks_by_user(db: AsyncSession, user_id: int) -> List[Task]:
    """All tasks for a user, newest first"""
    result = await db.execute(
        select(Task).where(Task.user_id == user_id).order_by(Task.id.desc())
    )
    return list(result.scalars().all())


async def get_tasks_by_user_and_status(db: AsyncSession, user_id: int, status: TaskStatus) -> List[Task]:
    result = await db.execute(
        select(Task)
        .where(Task.user_id == user_id, Task.status == status)
        .order_by(Task.id.desc())
    )
    return list(result.scalars().all())


async def get_tasks_by_user_and_position(db: AsyncSession, user_id: int) -> List[Task]:
    """Tasks in manual (drag-and-drop) order"""
    result = await db.execute(
        select(Task)
        .where(Task.user_id == user_id)
        .order_by(Task.position.asc(), Task.id.asc())
    )
    return list(result.scalars().all())


async def get_tasks_by_due_date(
    db: AsyncSession,
    user_id: int,
    max_due_date: Optional[datetime] = None,
) -> List[Task]:
    """Tasks with a due date, soonest first, optionally due no later than max_due_date"""
    query = select(Task).where(Task.user_id == user_id, Task.due_date.isnot(None))
    if max_due_date is not None:
        query = query.where(Task.due_date <= max_due_date)
    result = await db.execute(query.order_by(Task.due_date.asc(), Task.id.asc()))
    return list(result.scalars().all())


async def get_overdue_tasks_by_user(db: AsyncSession, user_id: int, current_time: datetime) -> List[Task]:
    result = await db.execute(
        select(Task)
        .where(
            Task.user_id == user_id,
            Task.due_date.isnot(None),
            Task.due_date < current_time,
            Task.status != TaskStatus.COMPLETED,
        )
        .order_by(Task.id.desc())
    )
    return list(result.scalars().all())


async def get_task_count_by_user_and_status(db: AsyncSession, user_id: int, status: TaskStatus) -> int:
    result = await db.execute(
        select(func.count(Task.id)).where(Task.user_id == user_id, Task.status == status)
    )
    return result.scalar() or 0


async def get_task_count_created_since(db: AsyncSession, user_id: int, since: datetime) -> int:
    result = await db.execute(
        select(func.count(Task.id)).where(Task.user_id == user_id, Task.created_at >= since)
    )
    return result.scalar() or 0


async def get_task_count_completed_since(db: AsyncSession, user_id: int, since: datetime) -> int:
    result = await db.execute(
        select(func.count(Task.id)).where(
            Task.user_id == user_id,
            Task.status == TaskStatus.COMPLETED,
            Task.completed_at >= since,
        )
    )
    return result.scalar() or 0


async def get_high_priority_tasks_by_user(db: AsyncSession, user_id: int, limit: int = 10) -> List[Task]:
    """Open high-priority tasks, newest first"""
    result = await db.execute(
        select(Task)
        .where(
            Task.user_id == user_id,
            Task.priority == TaskPriority.HIGH,
            Task.status != TaskStatus.COMPLETED,
        )
        .order_by(Task.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_max_position_for_user(db: AsyncSession, user_id: int) -> int:
    """Highest position in use, 0 when the user has no tasks"""
    result = await db.execute(
        select(func.max(Task.position)).where(Task.user_id == user_id)
    )
    return result.scalar() or 0


# --- Update ---

async def update_task(db: AsyncSession, task: Task, updates: Dict[str, Any]) -> Task:
    for key, value in updates.items():
        setattr(task, key, value)
    task.updated_at = utcnow()
    await db.flush()
    return task


async def complete_task(db: AsyncSession, task: Task) -> Task:
    now = utcnow()
    task.status = TaskStatus.COMPLETED
    task.completed_at = now
    task.updated_at = now
    await db.flush()
    return task


async def update_task_position(db: AsyncSession, task: Task, new_position: int) -> Task:
    return await update_task(db, task, {"position": new_position})


async def batch_update_task_positions(db: AsyncSession, updates: Iterable[Tuple[Task, int]]) -> None:
    """Apply (task, position) pairs; the unit of work flushes them as one batch"""
    now = utcnow()
    for task, position in updates:
        task.position = position
        task.updated_at = now
    await db.flush()


# --- Delete ---

async def delete_task(db: AsyncSession, task: Task) -> None:
    await db.delete(task)
    await db.flush()


async def get_completed_tasks_by_user(db: AsyncSession, user_id: int) -> List[Task]:
    return await get_tasks_by_user_and_status(db, user_id, TaskStatus.COMPLETED)


async def delete_tasks(db: AsyncSession, tasks: List[Task]) -> int:
    for task in tasks:
        await db.delete(task)
    await db.flush()
    return len(tasks)
