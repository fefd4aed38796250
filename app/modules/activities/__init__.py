# Activities module
from app.modules.activities.models import RecentActivity, ActivityAction
from app.modules.activities.services import ActivityService

__all__ = ["RecentActivity", "ActivityAction", "ActivityService"]
