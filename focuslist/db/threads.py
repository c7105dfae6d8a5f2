"""
Record access: assistant threads.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from focuslist.models.thread import Thread, ThreadStatus
from focuslist.utils.helpers import utcnow


async def create_thread(
    db: AsyncSession,
    user_id: int,
    title: Optional[str] = None,
    status: ThreadStatus = ThreadStatus.ACTIVE,
) -> Thread:
    now = utcnow()
    thread = Thread(
        user_id=user_id,
        title=title,
        status=status,
        created_at=now,
        updated_at=now,
    )
    db.add(thread)
    await db.flush()
    return thread


async def get_thread_by_id(db: AsyncSession, thread_id: int) -> Optional[Thread]:
    return await db.get(Thread, thread_id)


async def get_threads_by_user(db: AsyncSession, user_id: int) -> List[Thread]:
    result = await db.execute(
        select(Thread).where(Thread.user_id == user_id).order_by(Thread.id.desc())
    )
    return list(result.scalars().all())


async def get_threads_by_user_and_status(db: AsyncSession, user_id: int, status: ThreadStatus) -> List[Thread]:
    result = await db.execute(
        select(Thread)
        .where(Thread.user_id == user_id, Thread.status == status)
        .order_by(Thread.id.desc())
    )
    return list(result.scalars().all())


async def get_active_threads_by_user(db: AsyncSession, user_id: int) -> List[Thread]:
    return await get_threads_by_user_and_status(db, user_id, ThreadStatus.ACTIVE)


async def get_threads_by_user_ordered_by_last_message(
    db: AsyncSession,
    user_id: int,
    limit: Optional[int] = None,
) -> List[Thread]:
    """Most recently messaged first; threads without messages come last"""
    query = (
        select(Thread)
        .where(Thread.user_id == user_id)
        .order_by(Thread.last_message_at.desc().nullslast(), Thread.id.desc())
    )
    if limit:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def update_thread(db: AsyncSession, thread: Thread, updates: Dict[str, Any]) -> Thread:
    for key, value in updates.items():
        setattr(thread, key, value)
    thread.updated_at = utcnow()
    await db.flush()
    return thread


async def update_thread_last_message(db: AsyncSession, thread: Thread, last_message_at: datetime) -> Thread:
    return await update_thread(db, thread, {"last_message_at": last_message_at})


async def archive_thread(db: AsyncSession, thread: Thread) -> Thread:
    return await update_thread(db, thread, {"status": ThreadStatus.ARCHIVED})


async def delete_thread(db: AsyncSession, thread: Thread) -> None:
    await db.delete(thread)
    await db.flush()
