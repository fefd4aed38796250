from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.modules.users.models import User
from app.modules.activities.schemas import ActivityListResponse
from app.modules.activities.services import ActivityService

router = APIRouter(prefix="/api/v1/activities", tags=["activities"])


@router.get("", response_model=ActivityListResponse)
async def list_activities(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Latest activity entries, newest first"""
    service = ActivityService(db)
    activities, total = await service.list_recent(limit)
    return {
        "activities": [ActivityService.with_time_ago(a) for a in activities],
        "total": total
    }
