"""
User preferences API endpoints - per-user UI/UX settings
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, Optional
from datetime import datetime
from pydantic import BaseModel

from focuslist.database import get_db
from focuslist.models.user import User
from focuslist.models.user_preferences import Theme, DefaultView, SortBy, SortOrder, DEFAULT_PREFERENCES
from focuslist.db import user_preferences as preferences_db
from focuslist.api.auth import get_current_user
from focuslist.api.errors import enforce_rate_limit
from focuslist.api.responses import IdResponse
from focuslist.services.rate_limiter import RateLimiter, get_rate_limiter

router = APIRouter()


class PreferencesResponse(BaseModel):
    id: Optional[int]  # None: defaults, nothing stored yet
    user_id: int
    theme: Theme
    default_view: DefaultView
    sort_by: SortBy
    sort_order: SortOrder
    show_completed_tasks: bool
    notifications_enabled: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PreferencesUpdate(BaseModel):
    theme: Optional[Theme] = None
    default_view: Optional[DefaultView] = None
    sort_by: Optional[SortBy] = None
    sort_order: Optional[SortOrder] = None
    show_completed_tasks: Optional[bool] = None
    notifications_enabled: Optional[bool] = None


class ThemeUpdate(BaseModel):
    theme: Theme


class DefaultViewUpdate(BaseModel):
    default_view: DefaultView


async def _apply_preferences(db: AsyncSession, user: User, updates: Dict[str, Any]) -> int:
    preferences = await preferences_db.get_or_create_user_preferences(db, user.id)
    if updates:
        await preferences_db.update_user_preferences(db, preferences, updates)
    await db.commit()
    return preferences.id


@router.get("/", response_model=PreferencesResponse)
async def get_preferences(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Stored preferences, or the defaults (id null) when none were saved yet"""
    preferences = await preferences_db.get_user_preferences_by_user(db, current_user.id)
    if preferences is None:
        return PreferencesResponse(id=None, user_id=current_user.id, **DEFAULT_PREFERENCES)
    return preferences


@router.post("/initialize", response_model=IdResponse)
async def initialize_preferences(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    """Create the defaults row if missing; idempotent"""
    await enforce_rate_limit(limiter, "updatePreferences", current_user)
    return IdResponse(id=await _apply_preferences(db, current_user, {}))


@router.patch("/", response_model=IdResponse)
async def update_preferences(
    data: PreferencesUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    await enforce_rate_limit(limiter, "updatePreferences", current_user)
    updates = data.model_dump(exclude_none=True)
    return IdResponse(id=await _apply_preferences(db, current_user, updates))


@router.put("/theme", response_model=IdResponse)
async def update_theme(
    data: ThemeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    await enforce_rate_limit(limiter, "updatePreferences", current_user)
    return IdResponse(id=await _apply_preferences(db, current_user, {"theme": data.theme}))


@router.put("/default-view", response_model=IdResponse)
async def update_default_view(
    data: DefaultViewUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    await enforce_rate_limit(limiter, "updatePreferences", current_user)
    return IdResponse(id=await _apply_preferences(db, current_user, {"default_view": data.default_view}))
