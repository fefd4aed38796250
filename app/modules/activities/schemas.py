from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List
from enum import Enum

from app.modules.users.schemas import UserRoleEnum


class ActivityActionEnum(str, Enum):
    ADD_PAYMENT = "Add Payment"
    ADD_CLIENT = "Add Client"
    PAID_OFF = "Paid Off"
    EDIT_BORROWER = "Edit Borrower Info"
    DELETE_BORROWER = "Delete Borrower"


class ActivityResponse(BaseModel):
    id: int
    action: ActivityActionEnum
    performed_by: str
    role: UserRoleEnum
    target: str
    details: Optional[str] = None
    created_at: datetime
    time_ago: Optional[str] = None

    class Config:
        from_attributes = True


class ActivityListResponse(BaseModel):
    activities: List[ActivityResponse]
    total: int
