"""
Dashboard endpoints: portfolio totals, payments coming due and the
activity feed.
"""
from dataclasses import asdict
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.modules.users.models import User
from app.modules.clients.services import ClientService
from app.modules.activities.services import ActivityService
from app.modules.dashboard.schemas import (
    DashboardStats, DashboardOverview, UpcomingPaymentListResponse
)

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


async def _stats(db: AsyncSession) -> dict:
    stats = await ClientService(db).portfolio_stats()
    return {**asdict(stats), "currency": settings.CURRENCY}


@router.get("", response_model=DashboardOverview)
async def get_overview(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Everything the dashboard landing page shows"""
    upcoming = await ClientService(db).upcoming_payments()
    activities, _ = await ActivityService(db).list_recent(settings.RECENT_ACTIVITY_LIMIT)
    return {
        "stats": await _stats(db),
        "upcoming_payments": upcoming,
        "recent_activity": [ActivityService.with_time_ago(a) for a in activities],
    }


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await _stats(db)


@router.get("/upcoming-payments", response_model=UpcomingPaymentListResponse)
async def get_upcoming_payments(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Payments due within the configured window, overdue ones first"""
    payments = await ClientService(db).upcoming_payments()
    return {
        "payments": payments,
        "window_days": settings.UPCOMING_PAYMENT_WINDOW_DAYS
    }
