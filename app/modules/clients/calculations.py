"""
Loan bookkeeping rules.

Pure functions over client/payment objects (ORM rows or anything with the
same attributes). Interest rates are monthly percentages, so a rate of 10
means 10% of the remaining balance per month.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from app.modules.clients.models import ClientStatus

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Coerce to a Decimal rounded to cents"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def monthly_interest(balance, rate) -> Decimal:
    """Interest accrued on the balance over one month"""
    return to_money(to_money(balance) * Decimal(str(rate)) / Decimal("100"))


def apply_payment(balance, capital_paid) -> Tuple[Decimal, bool]:
    """
    Reduce the balance by the capital part of a payment.
    Returns (new_balance, paid_off); the balance never drops below zero.
    """
    new_balance = to_money(balance) - to_money(capital_paid)
    if new_balance <= ZERO:
        return ZERO, True
    return new_balance, False


def last_payment_date(client) -> date:
    """Date of the latest payment, or the loan date when nothing was paid yet"""
    if client.payments:
        return max(p.date for p in client.payments)
    return client.loan_date


def next_due_date(client) -> date:
    """One calendar month after the last payment (clamped to month end)"""
    return last_payment_date(client) + relativedelta(months=1)


def derive_status(client, today: Optional[date] = None) -> ClientStatus:
    today = today or date.today()
    if to_money(client.remaining_balance) <= ZERO:
        return ClientStatus.PAID_OFF
    if next_due_date(client) < today:
        return ClientStatus.OVERDUE
    return ClientStatus.ACTIVE


def expected_payment(client, factor) -> Decimal:
    """Placeholder projection: one month of interest plus a margin for capital"""
    return to_money(
        monthly_interest(client.remaining_balance, client.interest_rate) * Decimal(str(factor))
    )


@dataclass
class UpcomingPayment:
    id: str
    client_id: int
    client_name: str
    due_date: date
    amount: Decimal
    is_overdue: bool


def upcoming_payments(
    clients: Iterable,
    today: Optional[date] = None,
    window_days: int = 7,
    factor=Decimal("1.1")
) -> List[UpcomingPayment]:
    """
    Project the next payment of every open loan and keep the ones due
    within the window (overdue ones included), earliest first.
    """
    today = today or date.today()
    horizon = today + timedelta(days=window_days)

    projected = []
    for client in clients:
        if client.status not in (ClientStatus.ACTIVE, ClientStatus.OVERDUE):
            continue

        due = next_due_date(client)
        if due > horizon:
            continue

        projected.append(UpcomingPayment(
            id=f"up-{client.id}",
            client_id=client.id,
            client_name=client.name,
            due_date=due,
            amount=expected_payment(client, factor),
            is_overdue=due < today
        ))

    projected.sort(key=lambda p: p.due_date)
    return projected


@dataclass
class PortfolioStats:
    total_clients: int
    total_loan_amount: Decimal
    total_outstanding: Decimal
    total_interest_paid: Decimal
    total_capital_paid: Decimal


def portfolio_stats(clients: Iterable) -> PortfolioStats:
    clients = list(clients)
    payments = [p for c in clients for p in c.payments]
    return PortfolioStats(
        total_clients=len(clients),
        total_loan_amount=to_money(sum((to_money(c.original_loan_amount) for c in clients), ZERO)),
        total_outstanding=to_money(sum((to_money(c.remaining_balance) for c in clients), ZERO)),
        total_interest_paid=to_money(sum((to_money(p.interest_paid) for p in payments), ZERO)),
        total_capital_paid=to_money(sum((to_money(p.capital_paid) for p in payments), ZERO)),
    )


def total_paid(client) -> Decimal:
    return to_money(sum((to_money(p.total_paid) for p in client.payments), ZERO))


def time_since(moment: datetime, now: Optional[datetime] = None) -> str:
    """Short relative label such as "just now", "5m ago" or "2d ago"."""
    now = now or datetime.now(timezone.utc)
    # SQLite hands back naive timestamps, which are UTC here
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = int((now - moment).total_seconds())
    if seconds < 5:
        return "just now"

    for unit_seconds, suffix in (
        (31536000, "y"),
        (2592000, "mo"),
        (86400, "d"),
        (3600, "h"),
        (60, "m"),
    ):
        if seconds >= unit_seconds:
            return f"{seconds // unit_seconds}{suffix} ago"
    return f"{seconds}s ago"


def format_currency(amount, currency: str = "MOP") -> str:
    return f"{currency} {to_money(amount):,.2f}"
