from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from datetime import datetime
from typing import Optional, List, Tuple
import logging

from app.modules.activities.models import RecentActivity, ActivityAction
from app.modules.clients.calculations import time_since
from app.modules.users.models import User

logger = logging.getLogger(__name__)


class ActivityService:
    """Records and lists entries of the dashboard activity feed"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def log_activity(
        self,
        actor: User,
        action: ActivityAction,
        target: str,
        details: Optional[str] = None
    ) -> RecentActivity:
        """
        Stage an activity entry in the current session.
        The caller commits it together with the change it describes.
        """
        activity = RecentActivity(
            action=action,
            performed_by=actor.name,
            role=actor.role,
            target=target,
            details=details
        )
        self.db.add(activity)
        logger.debug("%s by %s on %s", action.value, actor.username, target)
        return activity

    async def list_recent(self, limit: int = 10) -> Tuple[List[RecentActivity], int]:
        """Most recent activities first, with the total count"""
        total_result = await self.db.execute(select(func.count(RecentActivity.id)))
        total = total_result.scalar() or 0

        result = await self.db.execute(
            select(RecentActivity)
            .order_by(RecentActivity.created_at.desc(), RecentActivity.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all()), total

    @staticmethod
    def with_time_ago(activity: RecentActivity, now: Optional[datetime] = None) -> dict:
        return {
            "id": activity.id,
            "action": activity.action,
            "performed_by": activity.performed_by,
            "role": activity.role,
            "target": activity.target,
            "details": activity.details,
            "created_at": activity.created_at,
            "time_ago": time_since(activity.created_at, now),
        }
