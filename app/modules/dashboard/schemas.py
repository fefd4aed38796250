from pydantic import BaseModel
from datetime import date
from decimal import Decimal
from typing import List

from app.modules.activities.schemas import ActivityResponse


class DashboardStats(BaseModel):
    total_clients: int
    total_loan_amount: Decimal
    total_outstanding: Decimal
    total_interest_paid: Decimal
    total_capital_paid: Decimal
    currency: str


class UpcomingPaymentResponse(BaseModel):
    id: str
    client_id: int
    client_name: str
    due_date: date
    amount: Decimal
    is_overdue: bool

    class Config:
        from_attributes = True


class UpcomingPaymentListResponse(BaseModel):
    payments: List[UpcomingPaymentResponse]
    window_days: int


class DashboardOverview(BaseModel):
    stats: DashboardStats
    upcoming_payments: List[UpcomingPaymentResponse]
    recent_activity: List[ActivityResponse]
