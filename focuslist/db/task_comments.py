"""
Record access: task comments.
"""
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from focuslist.models.task_comment import TaskComment
from focuslist.utils.helpers import utcnow


async def create_task_comment(db: AsyncSession, task_id: int, user_id: int, content: str) -> TaskComment:
    now = utcnow()
    comment = TaskComment(
        task_id=task_id,
        user_id=user_id,
        content=content,
        created_at=now,
        updated_at=now,
    )
    db.add(comment)
    await db.flush()
    return comment


async def get_task_comment_by_id(db: AsyncSession, comment_id: int) -> Optional[TaskComment]:
    return await db.get(TaskComment, comment_id)


async def get_task_comments_by_task(db: AsyncSession, task_id: int) -> List[TaskComment]:
    result = await db.execute(
        select(TaskComment).where(TaskComment.task_id == task_id).order_by(TaskComment.id.desc())
    )
    return list(result.scalars().all())


async def get_task_comments_by_user(db: AsyncSession, user_id: int) -> List[TaskComment]:
    result = await db.execute(
        select(TaskComment).where(TaskComment.user_id == user_id).order_by(TaskComment.id.desc())
    )
    return list(result.scalars().all())


async def get_task_comment_count(db: AsyncSession, task_id: int) -> int:
    result = await db.execute(
        select(func.count(TaskComment.id)).where(TaskComment.task_id == task_id)
    )
    return result.scalar() or 0


async def update_task_comment(db: AsyncSession, comment: TaskComment, content: str) -> TaskComment:
    comment.content = content
    comment.updated_at = utcnow()
    await db.flush()
    return comment


async def delete_task_comment(db: AsyncSession, comment: TaskComment) -> None:
    await db.delete(comment)
    await db.flush()


async def delete_task_comments_by_task(db: AsyncSession, task_id: int) -> int:
    comments = await get_task_comments_by_task(db, task_id)
    for comment in comments:
        await db.delete(comment)
    await db.flush()
    return len(comments)
