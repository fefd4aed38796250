from pydantic import BaseModel, Field, validator
from datetime import date, datetime
from typing import Optional, List
from decimal import Decimal
from enum import Enum

from app.core.config import settings

EARLIEST_LOAN_DATE = date(1900, 1, 1)


class ClientStatusEnum(str, Enum):
    ACTIVE = "Active"
    OVERDUE = "Overdue"
    PAID_OFF = "Paid Off"


def _not_in_future(v: date) -> date:
    if v > date.today():
        raise ValueError('Date cannot be in the future')
    return v


def _default_interest_rate() -> Decimal:
    return Decimal(str(settings.DEFAULT_INTEREST_RATE))


def _check_interest_rate(v: Optional[Decimal]) -> Optional[Decimal]:
    if v is not None and v > Decimal(str(settings.MAX_INTEREST_RATE)):
        raise ValueError(f'Interest rate cannot exceed {settings.MAX_INTEREST_RATE}%')
    return v


# ============================================================
# Client Schemas
# ============================================================

class ClientCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    passport_number: Optional[str] = Field(None, max_length=50)
    mobile: str = Field(..., min_length=1, max_length=30)
    occupation: str = Field(..., min_length=1, max_length=100)
    years_working: int = Field(..., gt=0)
    amount_borrowed: Decimal = Field(..., ge=1, decimal_places=2)
    interest_rate: Decimal = Field(default_factory=_default_interest_rate, ge=0)
    loan_date: date

    @validator('loan_date')
    def validate_loan_date(cls, v):
        if v < EARLIEST_LOAN_DATE:
            raise ValueError('Loan date is too far in the past')
        return _not_in_future(v)

    @validator('interest_rate')
    def validate_interest_rate(cls, v):
        return _check_interest_rate(v)


class ClientUpdate(BaseModel):
    """
    Profile edit. Loan terms (amount, rate, date) are only applied when
    the editor is an administrator.
    """
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    passport_number: Optional[str] = Field(None, max_length=50)
    mobile: Optional[str] = Field(None, min_length=1, max_length=30)
    occupation: Optional[str] = Field(None, min_length=1, max_length=100)
    years_working: Optional[int] = Field(None, gt=0)
    amount_borrowed: Optional[Decimal] = Field(None, ge=1, decimal_places=2)
    interest_rate: Optional[Decimal] = Field(None, ge=0)
    loan_date: Optional[date] = None

    @validator('loan_date')
    def validate_loan_date(cls, v):
        if v is None:
            return v
        if v < EARLIEST_LOAN_DATE:
            raise ValueError('Loan date is too far in the past')
        return _not_in_future(v)

    @validator('interest_rate')
    def validate_interest_rate(cls, v):
        return _check_interest_rate(v)


class PaymentResponse(BaseModel):
    id: int
    client_id: int
    date: date
    capital_paid: Decimal
    interest_paid: Decimal
    total_paid: Decimal
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ClientSummaryResponse(BaseModel):
    id: int
    name: str
    mobile: str
    original_loan_amount: Decimal
    interest_rate: Decimal
    loan_date: date
    remaining_balance: Decimal
    status: ClientStatusEnum

    class Config:
        from_attributes = True


class ClientResponse(ClientSummaryResponse):
    passport_number: Optional[str] = None
    occupation: Optional[str] = None
    years_working: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ClientDetailResponse(ClientResponse):
    payments: List[PaymentResponse] = []
    total_paid: Decimal = Decimal("0.00")
    next_due_date: Optional[date] = None


class ClientUpdateResponse(BaseModel):
    client: ClientResponse
    changes: List[str]


# ============================================================
# Payment Schemas
# ============================================================

class PaymentCreate(BaseModel):
    payment_date: date = Field(default_factory=date.today)
    capital_paid: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    interest_paid: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    notes: Optional[str] = Field(None, max_length=1000)

    @validator('payment_date')
    def validate_payment_date(cls, v):
        return _not_in_future(v)

    @validator('interest_paid', always=True)
    def validate_total(cls, v, values):
        capital = values.get('capital_paid') or Decimal("0")
        if capital <= 0 and v <= 0:
            raise ValueError('Total payment must be greater than 0')
        return v


class PaymentRecordedResponse(BaseModel):
    payment: PaymentResponse
    client: ClientResponse
    paid_off: bool
    message: str


class SuggestedInterestResponse(BaseModel):
    client_id: int
    remaining_balance: Decimal
    interest_rate: Decimal
    suggested_interest: Decimal


class OccupationListResponse(BaseModel):
    occupations: List[str]
