"""
Dashboard API - aggregated data for all dashboard sections
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from pydantic import BaseModel

from focuslist.database import get_db
from focuslist.models.user import User
from focuslist.models.task import TaskStatus
from focuslist.db import tasks as tasks_db
from focuslist.db import task_activity as activity_db
from focuslist.db import threads as threads_db
from focuslist.api.auth import get_current_user
from focuslist.api.tasks import TaskResponse, TaskStats, build_task_response, build_task_stats
from focuslist.api.activity import ActivityResponse, build_activity_response
from focuslist.utils.helpers import utcnow, DAY, WEEK

router = APIRouter()

SECTION_LIMIT = 10


class DashboardSummary(BaseModel):
    tasks: TaskStats
    active_threads: int


class PeriodCounts(BaseModel):
    created: int
    completed: int


class ProductivityStats(BaseModel):
    today: PeriodCounts
    this_week: PeriodCounts


@router.get("/summary", response_model=DashboardSummary)
async def get_summary(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Task statistics plus the number of open assistant threads"""
    stats = await build_task_stats(db, current_user.id)
    active_threads = await threads_db.get_active_threads_by_user(db, current_user.id)
    return DashboardSummary(tasks=stats, active_threads=len(active_threads))


@router.get("/recent", response_model=List[TaskResponse])
async def get_recent_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    now = utcnow()
    tasks = await tasks_db.get_tasks_by_user(db, current_user.id)
    return [build_task_response(t, now) for t in tasks[:SECTION_LIMIT]]


@router.get("/activity", response_model=List[ActivityResponse])
async def get_recent_activity(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    now = utcnow()
    activities = await activity_db.get_recent_activity_by_user(db, current_user.id, SECTION_LIMIT)
    return [build_activity_response(a, now) for a in activities]


@router.get("/upcoming", response_model=List[TaskResponse])
async def get_upcoming_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Open tasks with a due date, soonest first"""
    now = utcnow()
    tasks = await tasks_db.get_tasks_by_due_date(db, current_user.id)
    upcoming = [t for t in tasks if t.status != TaskStatus.COMPLETED]
    return [build_task_response(t, now) for t in upcoming[:SECTION_LIMIT]]


@router.get("/high-priority", response_model=List[TaskResponse])
async def get_high_priority_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    now = utcnow()
    tasks = await tasks_db.get_high_priority_tasks_by_user(db, current_user.id, SECTION_LIMIT)
    return [build_task_response(t, now) for t in tasks]


@router.get("/productivity", response_model=ProductivityStats)
async def get_productivity(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Created and completed counts over trailing windows.

    `today` is the last 24 hours and `this_week` the last 7 days, both
    measured back from the time of the request.
    """
    now = utcnow()
    periods = {}
    for name, span in (("today", DAY), ("this_week", WEEK)):
        since = now - span
        periods[name] = PeriodCounts(
            created=await tasks_db.get_task_count_created_since(db, current_user.id, since),
            completed=await tasks_db.get_task_count_completed_since(db, current_user.id, since),
        )
    return ProductivityStats(**periods)
