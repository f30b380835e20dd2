"""Finance router - FastAPI endpoints for the ledger and dashboard metrics"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_tenant_profile
from ...database import get_db
from ...models import Profile, Transaction
from ...rate_limiter import API_POLICY, create_rate_limiter
from .schemas import (
    FinanceSummary,
    TransactionCreate,
    TransactionResponse,
    TransactionStatus,
    TransactionType,
    TransactionUpdate,
)
from .service import FinanceService

router = APIRouter(
    prefix="/finance",
    tags=["Finance"],
    dependencies=[Depends(create_rate_limiter(API_POLICY, key_prefix="api"))],
)


def get_finance_service(db: Session = Depends(get_db)) -> FinanceService:
    """Dependency injection for FinanceService"""
    return FinanceService(db)


def to_response(transaction: Transaction) -> TransactionResponse:
    return TransactionResponse(
        id=transaction.id,
        description=transaction.description,
        amount=transaction.amount,
        type=transaction.type,
        status=transaction.status,
        category=transaction.category,
        date=transaction.date,
    )


@router.get("/transactions", response_model=list[TransactionResponse])
async def get_transactions(
    start: Optional[date] = Query(None, description="First day, inclusive"),
    end: Optional[date] = Query(None, description="Last day, inclusive"),
    type: Optional[TransactionType] = Query(None),
    status: Optional[TransactionStatus] = Query(None),
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: FinanceService = Depends(get_finance_service),
):
    """Get the clinic's ledger, newest first"""
    return [
        to_response(t)
        for t in service.get_transactions(current_profile, start, end, type, status)
    ]


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    data: TransactionCreate,
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: FinanceService = Depends(get_finance_service),
):
    return to_response(service.create_transaction(data, current_profile))


@router.patch("/transactions/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: int,
    data: TransactionUpdate,
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: FinanceService = Depends(get_finance_service),
):
    """Edit an entry or mark it paid"""
    return to_response(service.update_transaction(transaction_id, data, current_profile))


@router.delete("/transactions/{transaction_id}")
async def delete_transaction(
    transaction_id: int,
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: FinanceService = Depends(get_finance_service),
):
    return service.delete_transaction(transaction_id, current_profile)


@router.get("/summary", response_model=FinanceSummary)
async def get_summary(
    reference: Optional[date] = Query(None, description="Any day of the month to report, defaults to today"),
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: FinanceService = Depends(get_finance_service),
):
    """Monthly revenue, expenses, receivables and the six-month chart"""
    return service.get_summary(current_profile, reference)
