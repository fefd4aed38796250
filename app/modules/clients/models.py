from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.core.database import Base
import enum


class ClientStatus(str, enum.Enum):
    """Loan status of a borrower"""
    ACTIVE = "Active"
    OVERDUE = "Overdue"
    PAID_OFF = "Paid Off"


OCCUPATIONS = [
    "Programmer",
    "Public Assistant",
    "Supervisor",
    "Room Attendant",
    "Security Guard",
    "Other",
]


class Client(Base):
    """Borrower profile together with the single loan it carries"""
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)

    # Profile
    name = Column(String(100), nullable=False, index=True)
    passport_number = Column(String(50), nullable=True)
    mobile = Column(String(30), nullable=False)
    occupation = Column(String(100), nullable=True)
    years_working = Column(Integer, nullable=True)

    # Loan
    original_loan_amount = Column(Numeric(15, 2), nullable=False)
    interest_rate = Column(Numeric(5, 2), nullable=False)  # Monthly, percent
    loan_date = Column(Date, nullable=False)
    remaining_balance = Column(Numeric(15, 2), nullable=False)
    status = Column(
        SQLEnum(ClientStatus, values_callable=lambda e: [m.value for m in e]),
        default=ClientStatus.ACTIVE,
        nullable=False
    )

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    payments = relationship(
        "Payment",
        back_populates="client",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="Payment.date.desc()"
    )

    def __repr__(self):
        return f"<Client(id={self.id}, name={self.name}, status={self.status})>"


class Payment(Base):
    """A repayment split into capital and interest"""
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)

    date = Column(Date, nullable=False)
    capital_paid = Column(Numeric(15, 2), nullable=False, default=0)
    interest_paid = Column(Numeric(15, 2), nullable=False, default=0)
    total_paid = Column(Numeric(15, 2), nullable=False)
    notes = Column(Text, nullable=True)
    created_by = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    client = relationship("Client", back_populates="payments")

    def __repr__(self):
        return f"<Payment(id={self.id}, client_id={self.client_id}, total={self.total_paid})>"
