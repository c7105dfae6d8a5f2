"""
Record access: user preferences (one row per user).
"""
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from focuslist.models.user_preferences import UserPreferences, DEFAULT_PREFERENCES
from focuslist.utils.helpers import utcnow


async def create_user_preferences(db: AsyncSession, user_id: int, **overrides: Any) -> UserPreferences:
    now = utcnow()
    preferences = UserPreferences(
        user_id=user_id,
        **{**DEFAULT_PREFERENCES, **overrides},
        created_at=now,
        updated_at=now,
    )
    db.add(preferences)
    await db.flush()
    return preferences


async def get_user_preferences_by_id(db: AsyncSession, preferences_id: int) -> Optional[UserPreferences]:
    return await db.get(UserPreferences, preferences_id)


async def get_user_preferences_by_user(db: AsyncSession, user_id: int) -> Optional[UserPreferences]:
    result = await db.execute(
        select(UserPreferences).where(UserPreferences.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_or_create_user_preferences(db: AsyncSession, user_id: int) -> UserPreferences:
    """
    Look up the user's row, creating it with defaults in the same transaction if absent.

    The insert runs in a savepoint: when a concurrent request created the
    row first, the unique user_id constraint rejects ours and the winner's
    row is returned instead.
    """
    existing = await get_user_preferences_by_user(db, user_id)
    if existing:
        return existing
    try:
        async with db.begin_nested():
            return await create_user_preferences(db, user_id)
    except IntegrityError:
        return await get_user_preferences_by_user(db, user_id)


async def update_user_preferences(
    db: AsyncSession,
    preferences: UserPreferences,
    updates: Dict[str, Any],
) -> UserPreferences:
    for key, value in updates.items():
        setattr(preferences, key, value)
    preferences.updated_at = utcnow()
    await db.flush()
    return preferences


async def delete_user_preferences(db: AsyncSession, preferences: UserPreferences) -> None:
    await db.delete(preferences)
    await db.flush()
