"""Appointment repository - Database operations for the agenda"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment, Tenant


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_appointments(
        db: Session,
        tenant_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Appointment]:
        """Get a tenant's appointments, optionally within [start, end)"""
        query = db.query(Appointment).filter(Appointment.tenant_id == tenant_id)

        if start:
            query = query.filter(Appointment.start_time >= start)

        if end:
            query = query.filter(Appointment.start_time < end)

        return query.order_by(Appointment.start_time.asc(), Appointment.id.asc()).all()

    @staticmethod
    def get_appointment_by_id(db: Session, appointment_id: int, tenant_id: int) -> Optional[Appointment]:
        return (
            db.query(Appointment)
            .filter(Appointment.id == appointment_id, Appointment.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def get_series(db: Session, series_id: str, tenant_id: int) -> list[Appointment]:
        return (
            db.query(Appointment)
            .filter(Appointment.series_id == series_id, Appointment.tenant_id == tenant_id)
            .order_by(Appointment.start_time.asc())
            .all()
        )

    @staticmethod
    def find_overlapping(
        db: Session, tenant_id: int, start: datetime, end: datetime
    ) -> list[Appointment]:
        """Non-cancelled appointments intersecting [start, end)"""
        return (
            db.query(Appointment)
            .filter(
                Appointment.tenant_id == tenant_id,
                Appointment.status != "cancelled",
                Appointment.start_time < end,
                Appointment.end_time > start,
            )
            .all()
        )

    @staticmethod
    def create_appointments(db: Session, appointments: list[Appointment]) -> list[Appointment]:
        """Insert one or more appointments in a single transaction"""
        db.add_all(appointments)
        db.commit()
        for appointment in appointments:
            db.refresh(appointment)
        return appointments

    @staticmethod
    def update_appointment(db: Session, appointment: Appointment, **updates) -> Appointment:
        for key, value in updates.items():
            if value is not None and hasattr(appointment, key):
                setattr(appointment, key, value)

        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete_appointment(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.commit()

    @staticmethod
    def delete_series(db: Session, series_id: str, tenant_id: int) -> int:
        deleted = (
            db.query(Appointment)
            .filter(Appointment.series_id == series_id, Appointment.tenant_id == tenant_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted

    @staticmethod
    def get_tenant_by_slug(db: Session, slug: str) -> Optional[Tenant]:
        return db.query(Tenant).filter(Tenant.slug == slug).first()
