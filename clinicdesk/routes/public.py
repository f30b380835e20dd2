"""
Public (unauthenticated) clinic pages: online booking and self check-in
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..domain.checkins.schemas import PublicCheckInCreate, PublicCheckInResponse
from ..domain.checkins.service import CheckInService
from ..domain.scheduling.schemas import PublicBookingCreate, PublicBookingResponse
from ..domain.scheduling.service import AppointmentService
from ..rate_limiter import PUBLIC_FORM_POLICY, create_rate_limiter, get_client_ip

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/public", tags=["Public"])

booking_rate_limit = create_rate_limiter(PUBLIC_FORM_POLICY, key_prefix="booking")
checkin_rate_limit = create_rate_limiter(PUBLIC_FORM_POLICY, key_prefix="checkin")


@router.post("/{slug}/bookings", response_model=PublicBookingResponse, status_code=201)
async def book_appointment(
    slug: str,
    data: PublicBookingCreate,
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(booking_rate_limit),
):
    """Book a one-hour appointment from the clinic's public page"""
    service = AppointmentService(db)
    tenant, appointment = service.book_public_appointment(slug, data, get_client_ip(request))
    return PublicBookingResponse(
        success=True,
        tenantName=tenant.name,
        appointmentId=appointment.public_id,
        startTime=appointment.start_time,
        endTime=appointment.end_time,
    )


@router.post("/{slug}/check-in", response_model=PublicCheckInResponse, status_code=201)
async def check_in(
    slug: str,
    data: PublicCheckInCreate,
    db: Session = Depends(get_db),
    _: None = Depends(checkin_rate_limit),
):
    """Join the clinic's waiting queue"""
    tenant, _checkin, position = CheckInService(db).public_checkin(slug, data)
    return PublicCheckInResponse(success=True, tenantName=tenant.name, position=position)
