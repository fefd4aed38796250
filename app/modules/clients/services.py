from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import date
from typing import Optional, List, Tuple
import logging

from app.core.config import settings
from app.modules.clients.models import Client, Payment, ClientStatus
from app.modules.clients.schemas import ClientCreate, ClientUpdate, PaymentCreate
from app.modules.clients import calculations
from app.modules.activities.models import ActivityAction
from app.modules.activities.services import ActivityService
from app.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)


# Display names used in the edit history, in form order
PROFILE_FIELDS = [
    ("name", "Name"),
    ("passport_number", "Passport Number"),
    ("mobile", "Mobile"),
    ("occupation", "Occupation"),
    ("years_working", "Years Working"),
]
LOAN_FIELDS = [
    ("amount_borrowed", "original_loan_amount", "Amount Borrowed"),
    ("interest_rate", "interest_rate", "Interest Rate"),
    ("loan_date", "loan_date", "Loan Date"),
]


class ClientService:
    """Service for borrower profiles and their payments"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.activities = ActivityService(db)

    # ============================================================
    # Queries
    # ============================================================

    async def get_client(self, client_id: int) -> Optional[Client]:
        result = await self.db.execute(select(Client).where(Client.id == client_id))
        return result.scalar_one_or_none()

    async def list_clients(self, today: Optional[date] = None) -> List[Client]:
        """All clients, newest first, with statuses brought up to date"""
        result = await self.db.execute(
            select(Client).order_by(Client.created_at.desc(), Client.id.desc())
        )
        clients = list(result.scalars().all())
        await self.refresh_statuses(clients, today)
        return clients

    async def refresh_statuses(self, clients: List[Client], today: Optional[date] = None) -> int:
        """Re-derive Active/Overdue/Paid Off and persist any change"""
        changed = []
        for client in clients:
            status = calculations.derive_status(client, today)
            if status != client.status:
                logger.info("Client %s status %s -> %s", client.id, client.status.value, status.value)
                client.status = status
                changed.append(client)
        if changed:
            await self.db.commit()
            for client in changed:
                await self.db.refresh(client)
        return len(changed)

    # ============================================================
    # Client Management
    # ============================================================

    async def create_client(self, data: ClientCreate, actor: User) -> Client:
        """Register a borrower with a fresh loan"""
        amount = calculations.to_money(data.amount_borrowed)
        client = Client(
            name=data.name.strip(),
            passport_number=data.passport_number or None,
            mobile=data.mobile.strip(),
            occupation=data.occupation,
            years_working=data.years_working,
            original_loan_amount=amount,
            interest_rate=data.interest_rate,
            loan_date=data.loan_date,
            remaining_balance=amount,
            status=ClientStatus.ACTIVE
        )
        self.db.add(client)

        self.activities.log_activity(
            actor,
            ActivityAction.ADD_CLIENT,
            client.name,
            details=f"Loan of {amount:.2f}"
        )

        await self.db.commit()
        await self.db.refresh(client)

        logger.info("Client %s created by %s with loan %s", client.id, actor.username, amount)
        return client

    async def update_client(
        self,
        client_id: int,
        data: ClientUpdate,
        actor: User
    ) -> Optional[Tuple[Client, List[str]]]:
        """
        Apply profile edits and return (client, changed field names).

        Loan terms are only changed by administrators; for other users those
        fields are ignored.
        """
        client = await self.get_client(client_id)
        if not client:
            return None

        updates = data.model_dump(exclude_unset=True)
        changes = []

        for field, label in PROFILE_FIELDS:
            if field not in updates:
                continue
            value = updates[field]
            if field == "passport_number":
                value = value or None
            elif value is None:
                # Only the passport number may be cleared
                continue
            if value != getattr(client, field):
                setattr(client, field, value)
                changes.append(label)

        if actor.role == UserRole.ADMIN:
            for field, column, label in LOAN_FIELDS:
                value = updates.get(field)
                if value is None:
                    continue
                if field == "amount_borrowed":
                    value = calculations.to_money(value)
                if value != getattr(client, column):
                    setattr(client, column, value)
                    changes.append(label)

        if changes:
            self.activities.log_activity(
                actor,
                ActivityAction.EDIT_BORROWER,
                client.name,
                details=f"Updated fields: {', '.join(changes)}"
            )
            await self.db.commit()
            await self.db.refresh(client)
            logger.info("Client %s edited by %s: %s", client.id, actor.username, changes)

        return client, changes

    async def delete_client(self, client_id: int, actor: User) -> Optional[Client]:
        """Remove a client along with their payment history"""
        if actor.role != UserRole.ADMIN:
            raise PermissionError("Only administrators can delete clients")

        client = await self.get_client(client_id)
        if not client:
            return None

        await self.db.delete(client)
        self.activities.log_activity(actor, ActivityAction.DELETE_BORROWER, client.name)
        await self.db.commit()

        logger.info("Client %s (%s) deleted by %s", client_id, client.name, actor.username)
        return client

    # ============================================================
    # Payments
    # ============================================================

    async def suggested_interest(self, client_id: int):
        """Interest due on the current balance for one month"""
        client = await self.get_client(client_id)
        if not client:
            return None
        return client, calculations.monthly_interest(client.remaining_balance, client.interest_rate)

    async def add_payment(
        self,
        client_id: int,
        data: PaymentCreate,
        actor: User
    ) -> Optional[Tuple[Payment, Client, bool]]:
        """
        Record a payment. Capital reduces the balance; once the balance
        reaches zero the loan is marked Paid Off.
        Returns (payment, client, paid_off).
        """
        client = await self.get_client(client_id)
        if not client:
            return None

        if client.status == ClientStatus.PAID_OFF:
            raise ValueError("This loan has already been paid off")

        capital = calculations.to_money(data.capital_paid)
        interest = calculations.to_money(data.interest_paid)
        total = capital + interest
        if total <= 0:
            raise ValueError("Total payment must be greater than 0")

        payment = Payment(
            date=data.payment_date,
            capital_paid=capital,
            interest_paid=interest,
            total_paid=total,
            notes=(data.notes or "").strip() or None,
            created_by=actor.name
        )
        client.payments.append(payment)

        new_balance, paid_off = calculations.apply_payment(client.remaining_balance, capital)
        client.remaining_balance = new_balance
        client.status = ClientStatus.PAID_OFF if paid_off else ClientStatus.ACTIVE

        self.activities.log_activity(
            actor,
            ActivityAction.PAID_OFF if paid_off else ActivityAction.ADD_PAYMENT,
            client.name,
            details=f"Payment of {total:.2f}"
        )

        await self.db.commit()
        await self.db.refresh(payment)
        await self.db.refresh(client)

        logger.info(
            "Payment of %s recorded for client %s by %s, balance now %s",
            calculations.format_currency(total, settings.CURRENCY), client.id, actor.username,
            calculations.format_currency(client.remaining_balance, settings.CURRENCY)
        )
        return payment, client, paid_off

    # ============================================================
    # Derived views
    # ============================================================

    async def upcoming_payments(self, today: Optional[date] = None):
        clients = await self.list_clients(today)
        return calculations.upcoming_payments(
            clients,
            today=today,
            window_days=settings.UPCOMING_PAYMENT_WINDOW_DAYS,
            factor=settings.EXPECTED_PAYMENT_FACTOR
        )

    async def portfolio_stats(self) -> calculations.PortfolioStats:
        result = await self.db.execute(select(Client))
        return calculations.portfolio_stats(result.scalars().all())
