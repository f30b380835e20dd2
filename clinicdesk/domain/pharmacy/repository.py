"""Medication repository - Database operations for the pharmacy inventory"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Medication


class MedicationRepository:
    """Repository for medication database operations"""

    @staticmethod
    def get_medications(
        db: Session,
        tenant_id: int,
        search: Optional[str] = None,
        max_stock: Optional[int] = None,
    ) -> list[Medication]:
        """Get a tenant's medications ordered by name, optionally filtered"""
        query = db.query(Medication).filter(Medication.tenant_id == tenant_id)

        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(Medication.name).like(pattern),
                    func.lower(Medication.category).like(pattern),
                )
            )

        if max_stock is not None:
            query = query.filter(Medication.stock < max_stock)

        return query.order_by(Medication.name.asc(), Medication.id.asc()).all()

    @staticmethod
    def get_medication_by_id(db: Session, medication_id: int, tenant_id: int) -> Optional[Medication]:
        return (
            db.query(Medication)
            .filter(Medication.id == medication_id, Medication.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def create_medication(db: Session, medication: Medication) -> Medication:
        db.add(medication)
        db.commit()
        db.refresh(medication)
        return medication

    @staticmethod
    def update_medication(db: Session, medication: Medication, **updates) -> Medication:
        for key, value in updates.items():
            if value is not None and hasattr(medication, key):
                setattr(medication, key, value)

        db.commit()
        db.refresh(medication)
        return medication

    @staticmethod
    def delete_medication(db: Session, medication: Medication) -> None:
        db.delete(medication)
        db.commit()
