"""
AI assistant API - persisted conversation threads and chat
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel
import anthropic

from focuslist.database import get_db
from focuslist.models.user import User
from focuslist.models.thread import Thread, ThreadStatus
from focuslist.models.message import Message, MessageRole, MessageMetadata
from focuslist.db import threads as threads_db
from focuslist.db import messages as messages_db
from focuslist.api.auth import get_current_user
from focuslist.api.errors import enforce_rate_limit, require_owned, require_valid
from focuslist.api.responses import IdResponse, SuccessResponse
from focuslist.services.claude_service import claude_service, AssistantUnavailableError
from focuslist.services.rate_limiter import RateLimiter, get_rate_limiter
from focuslist.utils.helpers import utcnow
from focuslist.utils.validators import VALIDATION_LIMITS, is_valid_message_content, is_valid_thread_title
from focuslist.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()

TITLE_RULE = "Thread title must be max 100 characters"
CONTENT_RULE = "Message content must be between 1 and 10000 characters"

CHAT_SYSTEM_PROMPT = """You are the assistant built into FocusList, a personal task manager.
Help the user plan, prioritise and break down their work.
Be concise and actionable."""


# --- Pydantic Schemas ---

class ThreadResponse(BaseModel):
    id: int
    user_id: int
    title: Optional[str]
    status: ThreadStatus
    last_message_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ThreadCreate(BaseModel):
    title: Optional[str] = None


class ThreadUpdate(BaseModel):
    title: Optional[str] = None
    status: Optional[ThreadStatus] = None


class MessageResponse(BaseModel):
    id: int
    thread_id: int
    user_id: int
    role: MessageRole
    content: str
    metadata: Optional[MessageMetadata] = None
    created_at: datetime


class MessageCreate(BaseModel):
    content: str


class ChatRequest(BaseModel):
    message: str


class ChatResponse(BaseModel):
    user_message_id: int
    assistant_message_id: int
    response: str


def build_message_response(message: Message) -> MessageResponse:
    return MessageResponse(
        id=message.id,
        thread_id=message.thread_id,
        user_id=message.user_id,
        role=message.role,
        content=message.content,
        metadata=message.message_metadata,
        created_at=message.created_at,
    )


def placeholder_reply(message: str) -> str:
    return f'I received your message: "{message}". (AI assistant is not configured)'


async def _get_owned_thread(db: AsyncSession, thread_id: int, user: User, action: str) -> Thread:
    return require_owned(await threads_db.get_thread_by_id(db, thread_id), user, "thread", action)


async def _post_message(
    db: AsyncSession,
    thread: Thread,
    user: User,
    role: MessageRole,
    content: str,
    metadata: Optional[MessageMetadata] = None,
) -> Message:
    message = await messages_db.create_message(db, thread.id, user.id, role, content, metadata)
    await threads_db.update_thread_last_message(db, thread, message.created_at)
    return message


# --- Threads ---

@router.get("/threads", response_model=List[ThreadResponse])
async def list_threads(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """All threads, most recently messaged first"""
    return await threads_db.get_threads_by_user_ordered_by_last_message(db, current_user.id)


@router.get("/threads/active", response_model=List[ThreadResponse])
async def list_active_threads(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await threads_db.get_active_threads_by_user(db, current_user.id)


@router.get("/threads/{thread_id}", response_model=ThreadResponse)
async def get_thread(
    thread_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await _get_owned_thread(db, thread_id, current_user, "view")


@router.post("/threads", response_model=IdResponse)
async def create_thread(
    data: ThreadCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    await enforce_rate_limit(limiter, "createThread", current_user)
    require_valid([] if is_valid_thread_title(data.title) else [TITLE_RULE])

    thread = await threads_db.create_thread(db, current_user.id, title=data.title)
    await db.commit()
    return IdResponse(id=thread.id)


@router.patch("/threads/{thread_id}", response_model=IdResponse)
async def update_thread(
    thread_id: int,
    data: ThreadUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    await enforce_rate_limit(limiter, "updateThread", current_user)

    thread = await _get_owned_thread(db, thread_id, current_user, "update")
    require_valid([] if is_valid_thread_title(data.title) else [TITLE_RULE])

    updates = data.model_dump(exclude_none=True)
    if updates:
        await threads_db.update_thread(db, thread, updates)
    await db.commit()
    return IdResponse(id=thread.id)


@router.post("/threads/{thread_id}/archive", response_model=IdResponse)
async def archive_thread(
    thread_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    await enforce_rate_limit(limiter, "updateThread", current_user)

    thread = await _get_owned_thread(db, thread_id, current_user, "archive")
    await threads_db.archive_thread(db, thread)
    await db.commit()
    return IdResponse(id=thread.id)


@router.delete("/threads/{thread_id}", response_model=SuccessResponse)
async def delete_thread(
    thread_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    """Delete a thread together with all of its messages"""
    await enforce_rate_limit(limiter, "deleteThread", current_user)

    thread = await _get_owned_thread(db, thread_id, current_user, "delete")
    await messages_db.delete_messages_by_thread(db, thread.id)
    await threads_db.delete_thread(db, thread)
    await db.commit()
    return SuccessResponse()


# --- Messages ---

@router.get("/threads/{thread_id}/messages", response_model=List[MessageResponse])
async def list_messages(
    thread_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Conversation in order, oldest first"""
    await _get_owned_thread(db, thread_id, current_user, "view messages in")
    messages = await messages_db.get_messages_by_thread_ordered(db, thread_id)
    return [build_message_response(m) for m in messages]


@router.get("/threads/{thread_id}/messages/recent", response_model=List[MessageResponse])
async def list_recent_messages(
    thread_id: int,
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await _get_owned_thread(db, thread_id, current_user, "view messages in")
    messages = await messages_db.get_recent_messages_by_thread(db, thread_id, limit)
    return [build_message_response(m) for m in messages]


@router.post("/threads/{thread_id}/messages", response_model=IdResponse)
async def send_message(
    thread_id: int,
    data: MessageCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    await enforce_rate_limit(limiter, "sendMessage", current_user)

    thread = await _get_owned_thread(db, thread_id, current_user, "send messages in")
    require_valid([] if is_valid_message_content(data.content) else [CONTENT_RULE])

    message = await _post_message(db, thread, current_user, MessageRole.USER, data.content)
    await db.commit()
    return IdResponse(id=message.id)


@router.post("/threads/{thread_id}/chat", response_model=ChatResponse)
async def chat(
    thread_id: int,
    data: ChatRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    """
    Send a message and get the assistant's reply.

    The user's message is committed before the assistant is asked, so it
    survives a failed or slow completion. When the assistant is not
    configured, errors out or answers with nothing, a placeholder reply is
    stored instead and the reason is kept in the message metadata.
    """
    await enforce_rate_limit(limiter, "sendMessage", current_user)

    thread = await _get_owned_thread(db, thread_id, current_user, "send messages in")
    require_valid([] if is_valid_message_content(data.message) else [CONTENT_RULE])

    user_message = await _post_message(db, thread, current_user, MessageRole.USER, data.message)
    await db.commit()

    history = [
        {"role": m.role.value, "content": m.content}
        for m in await messages_db.get_messages_by_thread_ordered(db, thread.id)
        if m.role in (MessageRole.USER, MessageRole.ASSISTANT)
    ]

    fallback_reason = None
    try:
        reply = await claude_service.generate_reply(history, system_prompt=CHAT_SYSTEM_PROMPT)
    except (AssistantUnavailableError, anthropic.APIError) as e:
        logger.warning(f"Assistant reply failed for thread {thread.id}: {e}")
        fallback_reason = str(e)
    else:
        if not reply.content.strip():
            logger.warning(f"Assistant returned an empty reply for thread {thread.id}")
            fallback_reason = "empty reply"

    if fallback_reason is not None:
        content = placeholder_reply(data.message)
        metadata = MessageMetadata(model="placeholder", fallback_reason=fallback_reason)
    else:
        content = reply.content[:VALIDATION_LIMITS["message_content_max"]]
        metadata = MessageMetadata(
            model=reply.model,
            input_tokens=reply.input_tokens,
            output_tokens=reply.output_tokens,
        )

    assistant_message = await _post_message(
        db, thread, current_user, MessageRole.ASSISTANT, content, metadata
    )
    await db.commit()

    return ChatResponse(
        user_message_id=user_message.id,
        assistant_message_id=assistant_message.id,
        response=content,
    )
