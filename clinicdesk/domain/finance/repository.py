"""Transaction repository - Database operations for the finance ledger"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Transaction


class TransactionRepository:
    """Repository for ledger database operations"""

    @staticmethod
    def get_transactions(
        db: Session,
        tenant_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
        type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[Transaction]:
        """Get a tenant's transactions, newest first, optionally within [start, end]"""
        query = db.query(Transaction).filter(Transaction.tenant_id == tenant_id)

        if start:
            query = query.filter(Transaction.date >= start)

        if end:
            query = query.filter(Transaction.date <= end)

        if type:
            query = query.filter(Transaction.type == type)

        if status:
            query = query.filter(Transaction.status == status)

        return query.order_by(Transaction.date.desc(), Transaction.id.desc()).all()

    @staticmethod
    def get_transaction_by_id(db: Session, transaction_id: int, tenant_id: int) -> Optional[Transaction]:
        return (
            db.query(Transaction)
            .filter(Transaction.id == transaction_id, Transaction.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def create_transaction(db: Session, transaction: Transaction) -> Transaction:
        db.add(transaction)
        db.commit()
        db.refresh(transaction)
        return transaction

    @staticmethod
    def update_transaction(db: Session, transaction: Transaction, **updates) -> Transaction:
        for key, value in updates.items():
            if value is not None and hasattr(transaction, key):
                setattr(transaction, key, value)

        db.commit()
        db.refresh(transaction)
        return transaction

    @staticmethod
    def delete_transaction(db: Session, transaction: Transaction) -> None:
        db.delete(transaction)
        db.commit()
