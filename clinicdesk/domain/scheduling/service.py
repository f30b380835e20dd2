"""Scheduling service - Business logic for appointments and recurring series"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Appointment, Profile, Tenant
from ...utils.sanitization import sanitize_string
from .recurrence import generate_recurring_dates, get_recurrence_summary
from .repository import AppointmentRepository
from .schemas import AppointmentCreate, AppointmentUpdate, PublicBookingCreate

logger = logging.getLogger(__name__)

PUBLIC_BOOKING_DURATION = timedelta(hours=1)


def to_naive_utc(value: datetime) -> datetime:
    """Appointments are stored as naive UTC; naive input is assumed to be UTC already"""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AppointmentService:
    """Service layer for agenda business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()

    def get_appointments(
        self, profile: Profile, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[Appointment]:
        return self.repo.get_appointments(
            self.db,
            profile.tenant_id,
            to_naive_utc(start) if start else None,
            to_naive_utc(end) if end else None,
        )

    def get_appointment(self, appointment_id: int, profile: Profile) -> Appointment:
        appointment = self.repo.get_appointment_by_id(self.db, appointment_id, profile.tenant_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment

    def create_appointments(
        self, data: AppointmentCreate, profile: Profile
    ) -> tuple[Optional[str], list[Appointment], str]:
        """
        Create an appointment, or one row per occurrence when it repeats.

        Returns:
            (series_id, appointments, recurrence summary). series_id is None
            for a single appointment.
        """
        if data.recurrence:
            # Expand in the caller's wall-clock time, then store as UTC
            occurrences = generate_recurring_dates(data.startTime, data.recurrence)
            summary = get_recurrence_summary(data.recurrence)
        else:
            occurrences = [data.startTime]
            summary = "Does not repeat"

        if not occurrences:
            raise HTTPException(status_code=400, detail="Recurrence produced no occurrences")

        series_id = str(uuid.uuid4()) if len(occurrences) > 1 else None
        duration = timedelta(minutes=data.durationMinutes)

        patient_name = sanitize_string(data.patientName)
        notes = sanitize_string(data.notes) if data.notes else None

        appointments = [
            Appointment(
                tenant_id=profile.tenant_id,
                patient_name=patient_name,
                patient_phone=data.patientPhone,
                patient_email=data.patientEmail,
                start_time=to_naive_utc(occurrence),
                end_time=to_naive_utc(occurrence + duration),
                status=data.status,
                type=data.type,
                meet_link=data.meetLink,
                notes=notes,
                series_id=series_id,
            )
            for occurrence in occurrences
        ]

        logger.info(
            f"📅 Creating {len(appointments)} appointment(s) for tenant {profile.tenant_id}"
            + (f" in series {series_id}" if series_id else "")
        )
        return series_id, self.repo.create_appointments(self.db, appointments), summary

    def update_appointment(
        self, appointment_id: int, data: AppointmentUpdate, profile: Profile
    ) -> Appointment:
        appointment = self.get_appointment(appointment_id, profile)

        updates = {}
        if data.patientName is not None:
            updates["patient_name"] = sanitize_string(data.patientName)
        if data.patientPhone is not None:
            updates["patient_phone"] = data.patientPhone
        if data.patientEmail is not None:
            updates["patient_email"] = data.patientEmail
        if data.type is not None:
            updates["type"] = data.type
        if data.status is not None:
            updates["status"] = data.status
        if data.meetLink is not None:
            updates["meet_link"] = data.meetLink
        if data.notes is not None:
            updates["notes"] = sanitize_string(data.notes)

        # Moving the start keeps the current duration unless a new one is given
        if data.startTime is not None or data.durationMinutes is not None:
            start = to_naive_utc(data.startTime) if data.startTime else appointment.start_time
            if data.durationMinutes is not None:
                duration = timedelta(minutes=data.durationMinutes)
            else:
                duration = appointment.end_time - appointment.start_time
            updates["start_time"] = start
            updates["end_time"] = start + duration

        return self.repo.update_appointment(self.db, appointment, **updates)

    def delete_appointment(self, appointment_id: int, profile: Profile) -> dict:
        appointment = self.get_appointment(appointment_id, profile)
        self.repo.delete_appointment(self.db, appointment)
        return {"message": "Appointment deleted"}

    def get_series(self, series_id: str, profile: Profile) -> list[Appointment]:
        appointments = self.repo.get_series(self.db, series_id, profile.tenant_id)
        if not appointments:
            raise HTTPException(status_code=404, detail="Series not found")
        return appointments

    def delete_series(self, series_id: str, profile: Profile) -> dict:
        deleted = self.repo.delete_series(self.db, series_id, profile.tenant_id)
        if not deleted:
            raise HTTPException(status_code=404, detail="Series not found")

        logger.info(f"🗑️ Deleted series {series_id} ({deleted} appointments)")
        return {"message": "Series deleted", "deleted": deleted}

    def book_public_appointment(
        self, tenant_slug: str, data: PublicBookingCreate, client_ip: str
    ) -> tuple[Tenant, Appointment]:
        """Book a one-hour slot from the public booking page"""
        tenant = self.repo.get_tenant_by_slug(self.db, tenant_slug)
        if not tenant or tenant.status != "active":
            raise HTTPException(status_code=404, detail="Clinic not found")

        start = to_naive_utc(data.startTime)
        if start < utcnow():
            raise HTTPException(status_code=400, detail="Cannot book an appointment in the past")

        end = start + PUBLIC_BOOKING_DURATION

        # Re-check availability server side; the page may be stale
        if self.repo.find_overlapping(self.db, tenant.id, start, end):
            logger.info(f"⏰ Slot {start.isoformat()} already taken for tenant {tenant.id}")
            raise HTTPException(status_code=409, detail="Sorry, this time slot was just booked")

        kind = "Telemedicine" if data.type == "telemed" else "In person"
        appointment = Appointment(
            tenant_id=tenant.id,
            patient_name=sanitize_string(data.patientName),
            patient_phone=data.patientPhone,
            start_time=start,
            end_time=end,
            status="scheduled",
            type=data.type,
            notes=f"Online booking ({kind}) - IP: {client_ip}",
        )
        self.repo.create_appointments(self.db, [appointment])

        logger.info(f"✅ Public booking created for tenant {tenant.id} at {start.isoformat()}")
        return tenant, appointment
