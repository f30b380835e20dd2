"""Finance service - ledger entries and dashboard metrics"""

import logging
from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Profile, Transaction
from ...utils.sanitization import sanitize_string
from .repository import TransactionRepository
from .schemas import (
    FinanceSummary,
    MonthlyTotals,
    RevenueDistribution,
    TransactionCreate,
    TransactionUpdate,
)

logger = logging.getLogger(__name__)

INSURANCE_CATEGORIES = ("TISS", "Convênio")
CHART_MONTHS = 6
GROWTH_WINDOW_DAYS = 30


def is_insurance(transaction: Transaction) -> bool:
    """Income billed to a health plan rather than paid privately"""
    return (
        transaction.category in INSURANCE_CATEGORIES
        or "convênio" in (transaction.description or "").lower()
    )


def _total(transactions) -> float:
    return round(sum(t.amount for t in transactions), 2)


def _same_month(value: date, reference: date) -> bool:
    return value.year == reference.year and value.month == reference.month


def summarize_transactions(transactions: list[Transaction], reference: date) -> FinanceSummary:
    """
    Dashboard metrics for the month containing reference.

    revenue and expenses count paid entries of that month only. pending is
    every unpaid income entry regardless of date. Cancelled entries are ignored.
    """
    active = [t for t in transactions if t.status != "cancelled"]
    income = [t for t in active if t.type == "income"]
    this_month = [t for t in active if _same_month(t.date, reference) and t.status == "paid"]

    revenue = _total(t for t in this_month if t.type == "income")
    expenses = _total(t for t in this_month if t.type == "expense")
    pending = _total(t for t in income if t.status == "pending")

    insurance = sum(t.amount for t in income if is_insurance(t))
    private = sum(t.amount for t in income if not is_insurance(t))
    if insurance + private > 0:
        distribution = RevenueDistribution(
            private=round(private / (insurance + private) * 100),
            insurance=round(insurance / (insurance + private) * 100),
        )
    else:
        distribution = RevenueDistribution(private=0, insurance=0)

    # Last 30 days of income against the 30 days before
    window_start = reference - timedelta(days=GROWTH_WINDOW_DAYS)
    previous_start = reference - timedelta(days=2 * GROWTH_WINDOW_DAYS)
    last_window = sum(t.amount for t in income if window_start <= t.date <= reference)
    previous_window = sum(t.amount for t in income if previous_start <= t.date < window_start)
    growth: Optional[float] = None
    if previous_window > 0:
        growth = round((last_window - previous_window) / previous_window * 100, 1)

    monthly = []
    for offset in range(CHART_MONTHS - 1, -1, -1):
        month = reference - relativedelta(months=offset)
        paid = [t for t in active if t.status == "paid" and _same_month(t.date, month)]
        monthly.append(
            MonthlyTotals(
                month=month.strftime("%Y-%m"),
                income=_total(t for t in paid if t.type == "income"),
                expense=_total(t for t in paid if t.type == "expense"),
            )
        )

    return FinanceSummary(
        month=reference.strftime("%Y-%m"),
        revenue=revenue,
        expenses=expenses,
        balance=round(revenue - expenses, 2),
        pending=pending,
        distribution=distribution,
        revenueGrowth=growth,
        monthly=monthly,
    )


class FinanceService:
    """Service layer for ledger business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TransactionRepository()

    def get_transactions(
        self,
        profile: Profile,
        start: Optional[date] = None,
        end: Optional[date] = None,
        type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[Transaction]:
        if start and end and start > end:
            raise HTTPException(status_code=400, detail="start must be on or before end")
        return self.repo.get_transactions(self.db, profile.tenant_id, start, end, type, status)

    def get_transaction(self, transaction_id: int, profile: Profile) -> Transaction:
        transaction = self.repo.get_transaction_by_id(self.db, transaction_id, profile.tenant_id)
        if not transaction:
            raise HTTPException(status_code=404, detail="Transaction not found")
        return transaction

    def create_transaction(self, data: TransactionCreate, profile: Profile) -> Transaction:
        transaction = Transaction(
            tenant_id=profile.tenant_id,
            description=sanitize_string(data.description),
            amount=round(data.amount, 2),
            type=data.type,
            status=data.status,
            category=sanitize_string(data.category) if data.category else None,
            date=data.date,
        )
        transaction = self.repo.create_transaction(self.db, transaction)
        logger.info(
            f"💰 {data.type.capitalize()} of {transaction.amount:.2f} recorded for tenant {profile.tenant_id}"
        )
        return transaction

    def update_transaction(
        self, transaction_id: int, data: TransactionUpdate, profile: Profile
    ) -> Transaction:
        transaction = self.get_transaction(transaction_id, profile)

        updates = data.model_dump(exclude_none=True)
        if "description" in updates:
            updates["description"] = sanitize_string(updates["description"])
        if "category" in updates:
            updates["category"] = sanitize_string(updates["category"])
        if "amount" in updates:
            updates["amount"] = round(updates["amount"], 2)

        return self.repo.update_transaction(self.db, transaction, **updates)

    def delete_transaction(self, transaction_id: int, profile: Profile) -> dict:
        transaction = self.get_transaction(transaction_id, profile)
        self.repo.delete_transaction(self.db, transaction)
        return {"message": "Transaction deleted"}

    def get_summary(self, profile: Profile, reference: Optional[date] = None) -> FinanceSummary:
        reference = reference or date.today()
        transactions = self.repo.get_transactions(self.db, profile.tenant_id)
        return summarize_transactions(transactions, reference)
