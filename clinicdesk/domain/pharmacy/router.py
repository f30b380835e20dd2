"""Pharmacy router - FastAPI endpoints for the medication inventory"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_tenant_profile
from ...database import get_db
from ...models import Medication, Profile
from ...rate_limiter import API_POLICY, create_rate_limiter
from .schemas import MedicationCreate, MedicationResponse, MedicationUpdate, StockAdjustment
from .service import PharmacyService, is_low_stock

router = APIRouter(
    prefix="/medications",
    tags=["Pharmacy"],
    dependencies=[Depends(create_rate_limiter(API_POLICY, key_prefix="api"))],
)


def get_pharmacy_service(db: Session = Depends(get_db)) -> PharmacyService:
    """Dependency injection for PharmacyService"""
    return PharmacyService(db)


def to_response(medication: Medication) -> MedicationResponse:
    return MedicationResponse(
        id=medication.id,
        name=medication.name,
        description=medication.description,
        dosage=medication.dosage,
        price=medication.price,
        stock=medication.stock,
        category=medication.category,
        lowStock=is_low_stock(medication),
    )


@router.get("", response_model=list[MedicationResponse])
async def get_medications(
    search: Optional[str] = Query(None, max_length=100, description="Matches name or category"),
    lowStock: bool = Query(False, description="Only items that need restocking"),
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: PharmacyService = Depends(get_pharmacy_service),
):
    """Get the clinic's inventory"""
    return [to_response(m) for m in service.get_medications(current_profile, search, lowStock)]


@router.post("", response_model=MedicationResponse, status_code=201)
async def create_medication(
    data: MedicationCreate,
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: PharmacyService = Depends(get_pharmacy_service),
):
    return to_response(service.create_medication(data, current_profile))


@router.patch("/{medication_id}", response_model=MedicationResponse)
async def update_medication(
    medication_id: int,
    data: MedicationUpdate,
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: PharmacyService = Depends(get_pharmacy_service),
):
    return to_response(service.update_medication(medication_id, data, current_profile))


@router.post("/{medication_id}/stock", response_model=MedicationResponse)
async def adjust_stock(
    medication_id: int,
    data: StockAdjustment,
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: PharmacyService = Depends(get_pharmacy_service),
):
    """Restock (positive delta) or dispense (negative delta)"""
    return to_response(service.adjust_stock(medication_id, data.delta, current_profile))


@router.delete("/{medication_id}")
async def delete_medication(
    medication_id: int,
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: PharmacyService = Depends(get_pharmacy_service),
):
    return service.delete_medication(medication_id, current_profile)
