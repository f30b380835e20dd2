"""Check-in router - reception queue endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_tenant_profile
from ...database import get_db
from ...models import CheckIn, Profile
from ...rate_limiter import API_POLICY, create_rate_limiter
from .schemas import CheckInCreate, CheckInResponse, CheckInUpdate
from .service import CheckInService

router = APIRouter(
    prefix="/checkins",
    tags=["Check-ins"],
    dependencies=[Depends(create_rate_limiter(API_POLICY, key_prefix="api"))],
)


def get_checkin_service(db: Session = Depends(get_db)) -> CheckInService:
    """Dependency injection for CheckInService"""
    return CheckInService(db)


def to_response(checkin: CheckIn) -> CheckInResponse:
    return CheckInResponse(
        id=checkin.id,
        patientName=checkin.patient_name,
        patientCpf=checkin.patient_cpf,
        patientPhone=checkin.patient_phone,
        symptoms=checkin.symptoms,
        painLevel=checkin.pain_level,
        status=checkin.status,
        priority=checkin.priority,
        createdAt=checkin.created_at,
    )


@router.get("", response_model=list[CheckInResponse])
async def get_queue(
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: CheckInService = Depends(get_checkin_service),
):
    """Get the reception waiting queue"""
    return [to_response(c) for c in service.get_queue(current_profile)]


@router.post("", response_model=CheckInResponse, status_code=201)
async def create_checkin(
    data: CheckInCreate,
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: CheckInService = Depends(get_checkin_service),
):
    """Add a walk-in patient to the queue"""
    return to_response(service.create_checkin(data, current_profile))


@router.patch("/{checkin_id}", response_model=CheckInResponse)
async def update_checkin(
    checkin_id: int,
    data: CheckInUpdate,
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: CheckInService = Depends(get_checkin_service),
):
    """Call, complete or reprioritize a patient"""
    return to_response(service.update_checkin(checkin_id, data, current_profile))
