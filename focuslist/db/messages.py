"""
Record access: assistant messages.
"""
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from focuslist.models.message import Message, MessageRole, MessageMetadata
from focuslist.utils.helpers import utcnow


async def create_message(
    db: AsyncSession,
    thread_id: int,
    user_id: int,
    role: MessageRole,
    content: str,
    metadata: Optional[MessageMetadata] = None,
) -> Message:
    message = Message(
        thread_id=thread_id,
        user_id=user_id,
        role=role,
        content=content,
        message_metadata=metadata.model_dump(mode="json") if metadata else None,
        created_at=utcnow(),
    )
    db.add(message)
    await db.flush()
    return message


async def get_message_by_id(db: AsyncSession, message_id: int) -> Optional[Message]:
    return await db.get(Message, message_id)


async def get_messages_by_thread(db: AsyncSession, thread_id: int) -> List[Message]:
    result = await db.execute(select(Message).where(Message.thread_id == thread_id))
    return list(result.scalars().all())


async def get_messages_by_thread_ordered(db: AsyncSession, thread_id: int) -> List[Message]:
    """Conversation order, oldest first"""
    result = await db.execute(
        select(Message)
        .where(Message.thread_id == thread_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
    )
    return list(result.scalars().all())


async def get_recent_messages_by_thread(db: AsyncSession, thread_id: int, limit: int = 50) -> List[Message]:
    """Newest first"""
    result = await db.execute(
        select(Message)
        .where(Message.thread_id == thread_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_message_count_by_thread(db: AsyncSession, thread_id: int) -> int:
    result = await db.execute(
        select(func.count(Message.id)).where(Message.thread_id == thread_id)
    )
    return result.scalar() or 0


async def delete_message(db: AsyncSession, message: Message) -> None:
    await db.delete(message)
    await db.flush()


async def delete_messages_by_thread(db: AsyncSession, thread_id: int) -> int:
    messages = await get_messages_by_thread(db, thread_id)
    for message in messages:
        await db.delete(message)
    await db.flush()
    return len(messages)
