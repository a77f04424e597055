"""
Admin dashboard statistics.

Independent COUNT queries, no joins and no caching: the dashboard is
opened rarely and must show fresh numbers.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.logging import get_logger
from lutonai.core.timeutils import as_utc, utcnow
from lutonai.models.event import Event
from lutonai.models.user import User
from lutonai.schemas.stats import AdminStatsResponse, StatItem

logger = get_logger(__name__)

GROWTH_WINDOW = timedelta(days=30)


def calculate_growth(total: int, monthly: int) -> str:
    """Share of `total` created in the last window, one decimal, as a percentage string."""
    if total == 0:
        return "0.0%"
    return f"{monthly / total * 100:.1f}%"


def change_type(monthly: int) -> str:
    # Only "positive" and "neutral" are produced; there is no rule for "negative".
    return "positive" if monthly > 0 else "neutral"


def _growth_item(name: str, total: int, monthly: int) -> StatItem:
    return StatItem(
        name=name,
        value=str(total),
        change=calculate_growth(total, monthly),
        change_type=change_type(monthly),
    )


async def _count(db: AsyncSession, model, *criteria) -> int:
    query = select(func.count()).select_from(model)
    if criteria:
        query = query.where(*criteria)
    return (await db.execute(query)).scalar_one()


async def get_admin_stats(db: AsyncSession, now: Optional[datetime] = None) -> AdminStatsResponse:
    now = as_utc(now) or utcnow()
    window_start = now - GROWTH_WINDOW

    total_users = await _count(db, User)
    total_events = await _count(db, Event)
    monthly_users = await _count(db, User, User.created_at >= window_start)
    monthly_events = await _count(db, Event, Event.created_at >= window_start)
    upcoming_events = await _count(db, Event, Event.start_datetime >= now)

    logger.info(
        "admin_stats_computed",
        total_users=total_users,
        total_events=total_events,
        upcoming_events=upcoming_events,
    )

    return AdminStatsResponse(stats=[
        _growth_item("Total Users", total_users, monthly_users),
        _growth_item("Total Events", total_events, monthly_events),
        StatItem(
            name="Upcoming Events",
            value=str(upcoming_events),
            change="N/A",
            change_type="neutral",
        ),
    ])
