"""Pharmacy service - Business logic for the medication inventory"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Medication, Profile
from ...utils.sanitization import sanitize_string
from .repository import MedicationRepository
from .schemas import MedicationCreate, MedicationUpdate

logger = logging.getLogger(__name__)

# Items with fewer units than this are flagged for restocking
LOW_STOCK_THRESHOLD = 10


def is_low_stock(medication: Medication) -> bool:
    return medication.stock < LOW_STOCK_THRESHOLD


class PharmacyService:
    """Service layer for inventory business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = MedicationRepository()

    def get_medications(
        self, profile: Profile, search: Optional[str] = None, low_stock_only: bool = False
    ) -> list[Medication]:
        return self.repo.get_medications(
            self.db,
            profile.tenant_id,
            search=search.strip() if search else None,
            max_stock=LOW_STOCK_THRESHOLD if low_stock_only else None,
        )

    def get_medication(self, medication_id: int, profile: Profile) -> Medication:
        medication = self.repo.get_medication_by_id(self.db, medication_id, profile.tenant_id)
        if not medication:
            raise HTTPException(status_code=404, detail="Medication not found")
        return medication

    def create_medication(self, data: MedicationCreate, profile: Profile) -> Medication:
        medication = Medication(
            tenant_id=profile.tenant_id,
            name=sanitize_string(data.name),
            description=sanitize_string(data.description) if data.description else None,
            dosage=sanitize_string(data.dosage) if data.dosage else None,
            price=data.price,
            stock=data.stock,
            category=sanitize_string(data.category),
        )
        medication = self.repo.create_medication(self.db, medication)
        logger.info(f"💊 Medication {medication.id} added for tenant {profile.tenant_id}")
        return medication

    def update_medication(
        self, medication_id: int, data: MedicationUpdate, profile: Profile
    ) -> Medication:
        medication = self.get_medication(medication_id, profile)

        updates = data.model_dump(exclude_none=True)
        for field in ("name", "description", "dosage", "category"):
            if field in updates:
                updates[field] = sanitize_string(updates[field])

        return self.repo.update_medication(self.db, medication, **updates)

    def adjust_stock(self, medication_id: int, delta: int, profile: Profile) -> Medication:
        """Restock or dispense units; stock never goes below zero"""
        medication = self.get_medication(medication_id, profile)

        new_stock = medication.stock + delta
        if new_stock < 0:
            raise HTTPException(
                status_code=400,
                detail=f"Insufficient stock: {medication.stock} units available",
            )

        medication = self.repo.update_medication(self.db, medication, stock=new_stock)
        if is_low_stock(medication):
            logger.warning(
                f"⚠️ Low stock for medication {medication.id} ({medication.stock} units) "
                f"in tenant {profile.tenant_id}"
            )
        return medication

    def delete_medication(self, medication_id: int, profile: Profile) -> dict:
        medication = self.get_medication(medication_id, profile)
        self.repo.delete_medication(self.db, medication)
        return {"message": "Medication deleted"}
