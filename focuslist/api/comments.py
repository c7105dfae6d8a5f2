"""
Task comment API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from datetime import datetime
from pydantic import BaseModel

from focuslist.database import get_db
from focuslist.models.user import User
from focuslist.db import tasks as tasks_db
from focuslist.db import task_comments as comments_db
from focuslist.api.auth import get_current_user
from focuslist.api.errors import enforce_rate_limit, require_owned, require_valid
from focuslist.api.responses import IdResponse, SuccessResponse
from focuslist.services.rate_limiter import RateLimiter, get_rate_limiter
from focuslist.utils.validators import is_valid_comment_content

router = APIRouter()

CONTENT_RULE = "Comment content must be between 1 and 1000 characters"


class CommentResponse(BaseModel):
    id: int
    task_id: int
    user_id: int
    content: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CommentCreate(BaseModel):
    task_id: int
    content: str


class CommentUpdate(BaseModel):
    content: str


@router.get("/task/{task_id}", response_model=List[CommentResponse])
async def list_comments_for_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    require_owned(
        await tasks_db.get_task_by_id(db, task_id),
        current_user, "task", "view comments for",
    )
    return await comments_db.get_task_comments_by_task(db, task_id)


@router.get("/{comment_id}", response_model=CommentResponse)
async def get_comment(
    comment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return require_owned(
        await comments_db.get_task_comment_by_id(db, comment_id),
        current_user, "comment", "view",
    )


@router.post("/", response_model=IdResponse)
async def create_comment(
    data: CommentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    await enforce_rate_limit(limiter, "createComment", current_user)

    require_owned(
        await tasks_db.get_task_by_id(db, data.task_id),
        current_user, "task", "comment on",
    )
    require_valid([] if is_valid_comment_content(data.content) else [CONTENT_RULE])

    comment = await comments_db.create_task_comment(db, data.task_id, current_user.id, data.content)
    await db.commit()
    return IdResponse(id=comment.id)


@router.patch("/{comment_id}", response_model=IdResponse)
async def update_comment(
    comment_id: int,
    data: CommentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    await enforce_rate_limit(limiter, "updateComment", current_user)

    comment = require_owned(
        await comments_db.get_task_comment_by_id(db, comment_id),
        current_user, "comment", "update",
    )
    require_valid([] if is_valid_comment_content(data.content) else [CONTENT_RULE])

    await comments_db.update_task_comment(db, comment, data.content)
    await db.commit()
    return IdResponse(id=comment.id)


@router.delete("/{comment_id}", response_model=SuccessResponse)
async def delete_comment(
    comment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    await enforce_rate_limit(limiter, "deleteComment", current_user)

    comment = require_owned(
        await comments_db.get_task_comment_by_id(db, comment_id),
        current_user, "comment", "delete",
    )
    await comments_db.delete_task_comment(db, comment)
    await db.commit()
    return SuccessResponse()
