from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.core.dependencies import get_current_user, require_admin
from app.modules.users.models import User
from app.modules.clients import schemas, calculations
from app.modules.clients.models import OCCUPATIONS
from app.modules.clients.services import ClientService

router = APIRouter(prefix="/api/v1/clients", tags=["clients"])


def _detail(client) -> dict:
    data = schemas.ClientResponse.model_validate(client).model_dump()
    data["payments"] = [schemas.PaymentResponse.model_validate(p) for p in client.payments]
    data["total_paid"] = calculations.total_paid(client)
    if client.remaining_balance > 0:
        data["next_due_date"] = calculations.next_due_date(client)
    return data


@router.get("/occupations", response_model=schemas.OccupationListResponse)
async def list_occupations(current_user: User = Depends(get_current_user)):
    """Occupations offered by the client form"""
    return {"occupations": OCCUPATIONS}


@router.get("", response_model=List[schemas.ClientSummaryResponse])
async def list_clients(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List all clients with active or past loans"""
    service = ClientService(db)
    return await service.list_clients()


@router.post("", response_model=schemas.ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: schemas.ClientCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Add a new borrower"""
    service = ClientService(db)
    return await service.create_client(data, current_user)


@router.get("/{client_id}", response_model=schemas.ClientDetailResponse)
async def get_client(
    client_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Client profile with the payment history, latest payment first"""
    service = ClientService(db)
    client = await service.get_client(client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    await service.refresh_statuses([client])
    return _detail(client)


@router.put("/{client_id}", response_model=schemas.ClientUpdateResponse)
async def update_client(
    client_id: int,
    data: schemas.ClientUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Edit a borrower; loan terms are applied for administrators only"""
    service = ClientService(db)
    result = await service.update_client(client_id, data, current_user)
    if result is None:
        raise HTTPException(status_code=404, detail="Client not found")
    client, changes = result
    return {"client": client, "changes": changes}


@router.delete("/{client_id}", response_model=schemas.ClientResponse)
async def delete_client(
    client_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Permanently delete a client and all of their payments"""
    service = ClientService(db)
    client = await service.delete_client(client_id, admin)
    if client is None:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.get("/{client_id}/suggested-interest", response_model=schemas.SuggestedInterestResponse)
async def get_suggested_interest(
    client_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """One month of interest on the remaining balance, used to pre-fill payments"""
    service = ClientService(db)
    result = await service.suggested_interest(client_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Client not found")
    client, interest = result
    return {
        "client_id": client.id,
        "remaining_balance": client.remaining_balance,
        "interest_rate": client.interest_rate,
        "suggested_interest": interest
    }


@router.get("/{client_id}/payments", response_model=List[schemas.PaymentResponse])
async def list_payments(
    client_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = ClientService(db)
    client = await service.get_client(client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client.payments


@router.post(
    "/{client_id}/payments",
    response_model=schemas.PaymentRecordedResponse,
    status_code=status.HTTP_201_CREATED
)
async def add_payment(
    client_id: int,
    data: schemas.PaymentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Record a payment; the remaining balance is updated automatically"""
    service = ClientService(db)
    try:
        result = await service.add_payment(client_id, data, current_user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result is None:
        raise HTTPException(status_code=404, detail="Client not found")

    payment, client, paid_off = result
    return {
        "payment": payment,
        "client": client,
        "paid_off": paid_off,
        "message": f"Payment of {payment.total_paid:.2f} recorded for {client.name}."
    }
