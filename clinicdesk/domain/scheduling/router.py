"""Scheduling router - FastAPI endpoints for the clinic agenda"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_tenant_profile
from ...database import get_db
from ...models import Appointment, Profile
from ...rate_limiter import API_POLICY, create_rate_limiter
from .recurrence import generate_recurring_dates, get_recurrence_summary
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentSeriesResponse,
    AppointmentUpdate,
    RecurrencePreviewRequest,
    RecurrencePreviewResponse,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
    dependencies=[Depends(create_rate_limiter(API_POLICY, key_prefix="api"))],
)


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


def to_response(appointment: Appointment) -> AppointmentResponse:
    return AppointmentResponse(
        id=appointment.id,
        publicId=appointment.public_id,
        patientName=appointment.patient_name,
        patientPhone=appointment.patient_phone,
        patientEmail=appointment.patient_email,
        startTime=appointment.start_time,
        endTime=appointment.end_time,
        status=appointment.status,
        type=appointment.type,
        meetLink=appointment.meet_link,
        notes=appointment.notes,
        seriesId=appointment.series_id,
    )


@router.get("", response_model=list[AppointmentResponse])
async def get_appointments(
    start: Optional[datetime] = Query(None, description="Only appointments starting at or after"),
    end: Optional[datetime] = Query(None, description="Only appointments starting before"),
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Get the clinic's agenda"""
    return [to_response(a) for a in service.get_appointments(current_profile, start, end)]


@router.post("", response_model=AppointmentSeriesResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Create an appointment; a recurrence rule creates the whole series"""
    series_id, appointments, summary = service.create_appointments(data, current_profile)
    return AppointmentSeriesResponse(
        seriesId=series_id,
        count=len(appointments),
        summary=summary,
        appointments=[to_response(a) for a in appointments],
    )


@router.post("/recurrence/preview", response_model=RecurrencePreviewResponse)
async def preview_recurrence(
    data: RecurrencePreviewRequest,
    current_profile: Profile = Depends(get_current_tenant_profile),
):
    """Expand a recurrence rule without saving anything"""
    occurrences = generate_recurring_dates(data.startTime, data.recurrence)
    return RecurrencePreviewResponse(
        occurrences=occurrences,
        count=len(occurrences),
        summary=get_recurrence_summary(data.recurrence),
    )


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Update a single appointment"""
    return to_response(service.update_appointment(appointment_id, data, current_profile))


@router.get("/series/{series_id}", response_model=list[AppointmentResponse])
async def get_series(
    series_id: str,
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Get every occurrence of a recurring series"""
    return [to_response(a) for a in service.get_series(series_id, current_profile)]


@router.delete("/series/{series_id}")
async def delete_series(
    series_id: str,
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Delete every appointment of a recurring series"""
    return service.delete_series(series_id, current_profile)


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: int,
    current_profile: Profile = Depends(get_current_tenant_profile),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Delete a single appointment"""
    return service.delete_appointment(appointment_id, current_profile)
