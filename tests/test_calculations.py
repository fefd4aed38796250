"""
Unit tests for the loan bookkeeping rules
"""
import pytest
from dataclasses import dataclass, field
from decimal import Decimal
from datetime import date, datetime, timedelta, timezone
from typing import List

from app.modules.clients import calculations
from app.modules.clients.models import ClientStatus


@dataclass
class FakePayment:
    date: date
    capital_paid: Decimal = Decimal("0.00")
    interest_paid: Decimal = Decimal("0.00")

    @property
    def total_paid(self):
        return self.capital_paid + self.interest_paid


@dataclass
class FakeClient:
    id: int
    name: str
    loan_date: date
    remaining_balance: Decimal
    original_loan_amount: Decimal = Decimal("1000.00")
    interest_rate: Decimal = Decimal("10.00")
    status: ClientStatus = ClientStatus.ACTIVE
    payments: List[FakePayment] = field(default_factory=list)


TODAY = date(2026, 3, 15)


class TestInterest:
    """Tests for interest and balance arithmetic"""

    @pytest.mark.unit
    def test_monthly_interest(self):
        assert calculations.monthly_interest(Decimal("10000"), Decimal("10")) == Decimal("1000.00")

    @pytest.mark.unit
    def test_monthly_interest_rounds_half_up(self):
        # 333.33 * 1.5% = 4.99995
        assert calculations.monthly_interest(Decimal("333.33"), Decimal("1.5")) == Decimal("5.00")

    @pytest.mark.unit
    def test_monthly_interest_zero_rate(self):
        assert calculations.monthly_interest(Decimal("5000"), 0) == Decimal("0.00")

    @pytest.mark.unit
    def test_apply_payment_reduces_balance(self):
        balance, paid_off = calculations.apply_payment(Decimal("1000.00"), Decimal("250.00"))
        assert balance == Decimal("750.00")
        assert paid_off is False

    @pytest.mark.unit
    def test_apply_payment_exact_payoff(self):
        balance, paid_off = calculations.apply_payment(Decimal("1000.00"), Decimal("1000.00"))
        assert balance == Decimal("0.00")
        assert paid_off is True

    @pytest.mark.unit
    def test_apply_payment_never_goes_negative(self):
        balance, paid_off = calculations.apply_payment(Decimal("100.00"), Decimal("150.00"))
        assert balance == Decimal("0.00")
        assert paid_off is True


class TestDueDates:
    """Tests for due date projection and status derivation"""

    @pytest.mark.unit
    def test_next_due_date_from_loan_date(self):
        c = FakeClient(1, "A", loan_date=date(2026, 1, 10), remaining_balance=Decimal("500"))
        assert calculations.next_due_date(c) == date(2026, 2, 10)

    @pytest.mark.unit
    def test_next_due_date_uses_latest_payment(self):
        c = FakeClient(1, "A", loan_date=date(2026, 1, 10), remaining_balance=Decimal("500"))
        c.payments = [FakePayment(date(2026, 2, 20)), FakePayment(date(2026, 2, 5))]
        assert calculations.next_due_date(c) == date(2026, 3, 20)

    @pytest.mark.unit
    def test_next_due_date_clamps_month_end(self):
        c = FakeClient(1, "A", loan_date=date(2026, 1, 31), remaining_balance=Decimal("500"))
        assert calculations.next_due_date(c) == date(2026, 2, 28)

    @pytest.mark.unit
    def test_derive_status_active(self):
        c = FakeClient(1, "A", loan_date=date(2026, 3, 1), remaining_balance=Decimal("500"))
        assert calculations.derive_status(c, TODAY) == ClientStatus.ACTIVE

    @pytest.mark.unit
    def test_derive_status_overdue(self):
        c = FakeClient(1, "A", loan_date=date(2026, 1, 1), remaining_balance=Decimal("500"))
        assert calculations.derive_status(c, TODAY) == ClientStatus.OVERDUE

    @pytest.mark.unit
    def test_derive_status_due_today_is_not_overdue(self):
        c = FakeClient(1, "A", loan_date=date(2026, 2, 15), remaining_balance=Decimal("500"))
        assert calculations.derive_status(c, TODAY) == ClientStatus.ACTIVE

    @pytest.mark.unit
    def test_derive_status_paid_off(self):
        c = FakeClient(1, "A", loan_date=date(2025, 1, 1), remaining_balance=Decimal("0"))
        assert calculations.derive_status(c, TODAY) == ClientStatus.PAID_OFF


class TestUpcomingPayments:
    """Tests for the upcoming payment projection"""

    @pytest.mark.unit
    def test_window_filter_and_ordering(self):
        clients = [
            # due 2026-03-20, inside the window
            FakeClient(1, "Later", loan_date=date(2026, 2, 20), remaining_balance=Decimal("1000")),
            # due 2026-03-01, overdue
            FakeClient(2, "Overdue", loan_date=date(2026, 2, 1), remaining_balance=Decimal("2000"),
                       status=ClientStatus.OVERDUE),
            # due 2026-04-10, outside the window
            FakeClient(3, "Far", loan_date=date(2026, 3, 10), remaining_balance=Decimal("1000")),
            # paid off loans are never projected
            FakeClient(4, "Done", loan_date=date(2026, 2, 1), remaining_balance=Decimal("0"),
                       status=ClientStatus.PAID_OFF),
        ]

        upcoming = calculations.upcoming_payments(clients, today=TODAY, window_days=7)

        assert [p.client_name for p in upcoming] == ["Overdue", "Later"]
        assert upcoming[0].id == "up-2"
        assert upcoming[0].is_overdue is True
        assert upcoming[1].is_overdue is False
        assert upcoming[1].due_date == date(2026, 3, 20)

    @pytest.mark.unit
    def test_expected_amount_uses_factor(self):
        clients = [FakeClient(1, "A", loan_date=date(2026, 2, 18), remaining_balance=Decimal("1000"))]

        upcoming = calculations.upcoming_payments(clients, today=TODAY, window_days=7, factor=1.1)

        # 10% of 1000 = 100, times 1.1
        assert upcoming[0].amount == Decimal("110.00")

    @pytest.mark.unit
    def test_no_clients(self):
        assert calculations.upcoming_payments([], today=TODAY) == []


class TestPortfolio:
    """Tests for dashboard totals and display helpers"""

    @pytest.mark.unit
    def test_portfolio_stats(self):
        a = FakeClient(1, "A", loan_date=TODAY, remaining_balance=Decimal("700.00"),
                       original_loan_amount=Decimal("1000.00"))
        a.payments = [FakePayment(TODAY, Decimal("300.00"), Decimal("100.00"))]
        b = FakeClient(2, "B", loan_date=TODAY, remaining_balance=Decimal("2000.00"),
                       original_loan_amount=Decimal("2000.00"))

        stats = calculations.portfolio_stats([a, b])

        assert stats.total_clients == 2
        assert stats.total_loan_amount == Decimal("3000.00")
        assert stats.total_outstanding == Decimal("2700.00")
        assert stats.total_interest_paid == Decimal("100.00")
        assert stats.total_capital_paid == Decimal("300.00")

    @pytest.mark.unit
    def test_portfolio_stats_empty(self):
        stats = calculations.portfolio_stats([])
        assert stats.total_clients == 0
        assert stats.total_outstanding == Decimal("0.00")

    @pytest.mark.unit
    @pytest.mark.parametrize("delta,label", [
        (timedelta(seconds=2), "just now"),
        (timedelta(seconds=42), "42s ago"),
        (timedelta(minutes=5, seconds=10), "5m ago"),
        (timedelta(hours=3), "3h ago"),
        (timedelta(days=2, hours=1), "2d ago"),
        (timedelta(days=65), "2mo ago"),
        (timedelta(days=800), "2y ago"),
    ])
    def test_time_since(self, delta, label):
        now = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
        assert calculations.time_since(now - delta, now) == label

    @pytest.mark.unit
    def test_time_since_naive_timestamp(self):
        now = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
        assert calculations.time_since(datetime(2026, 3, 15, 11, 0), now) == "1h ago"

    @pytest.mark.unit
    def test_format_currency(self):
        assert calculations.format_currency(Decimal("1234.5")) == "MOP 1,234.50"
