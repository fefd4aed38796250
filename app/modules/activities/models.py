from sqlalchemy import Column, Integer, String, DateTime, Text, Enum as SQLEnum
from sqlalchemy.sql import func
from app.core.database import Base
from app.modules.users.models import UserRole
import enum


class ActivityAction(str, enum.Enum):
    """Actions shown in the dashboard activity feed"""
    ADD_PAYMENT = "Add Payment"
    ADD_CLIENT = "Add Client"
    PAID_OFF = "Paid Off"
    EDIT_BORROWER = "Edit Borrower Info"
    DELETE_BORROWER = "Delete Borrower"


class RecentActivity(Base):
    """
    Display-only activity entry. Rows are not linked to clients so they
    survive the deletion of the borrower they mention.
    """
    __tablename__ = "recent_activities"

    id = Column(Integer, primary_key=True, index=True)

    action = Column(
        SQLEnum(ActivityAction, values_callable=lambda e: [m.value for m in e]),
        nullable=False
    )
    performed_by = Column(String(100), nullable=False)
    role = Column(SQLEnum(UserRole), nullable=False)
    target = Column(String(100), nullable=False)  # Name of the client affected
    details = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<RecentActivity(id={self.id}, action={self.action}, target={self.target})>"
