"""Check-in service - reception waiting queue"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import CheckIn, Profile, Tenant
from ...utils.sanitization import sanitize_string
from .schemas import CheckInCreate, CheckInUpdate, PublicCheckInCreate

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ("waiting", "in_progress")


class CheckInService:
    def __init__(self, db: Session):
        self.db = db

    def get_queue(self, profile: Profile) -> list[CheckIn]:
        """Waiting and in-progress patients in arrival order"""
        return (
            self.db.query(CheckIn)
            .filter(CheckIn.tenant_id == profile.tenant_id, CheckIn.status.in_(ACTIVE_STATUSES))
            .order_by(CheckIn.created_at.asc(), CheckIn.id.asc())
            .all()
        )

    def _create(self, tenant_id: int, data: PublicCheckInCreate, priority: str) -> CheckIn:
        checkin = CheckIn(
            tenant_id=tenant_id,
            patient_name=sanitize_string(data.patientName),
            patient_cpf=data.patientCpf,
            patient_phone=data.patientPhone,
            symptoms=sanitize_string(data.symptoms) if data.symptoms else None,
            pain_level=data.painLevel,
            status="waiting",
            priority=priority,
        )
        self.db.add(checkin)
        self.db.commit()
        self.db.refresh(checkin)
        return checkin

    def create_checkin(self, data: CheckInCreate, profile: Profile) -> CheckIn:
        """Reception registers a walk-in patient"""
        checkin = self._create(profile.tenant_id, data, data.priority)
        logger.info(f"🧾 Reception check-in {checkin.id} for tenant {profile.tenant_id}")
        return checkin

    def public_checkin(self, tenant_slug: str, data: PublicCheckInCreate) -> tuple[Tenant, CheckIn, int]:
        """
        Patient checks in from the clinic's public page.

        Returns:
            (tenant, checkin, position in the waiting queue, 1-based)
        """
        tenant = self.db.query(Tenant).filter(Tenant.slug == tenant_slug).first()
        if not tenant or tenant.status != "active":
            raise HTTPException(status_code=404, detail="Clinic not found")

        checkin = self._create(tenant.id, data, "normal")
        position = (
            self.db.query(CheckIn)
            .filter(
                CheckIn.tenant_id == tenant.id,
                CheckIn.status == "waiting",
                CheckIn.id <= checkin.id,
            )
            .count()
        )

        logger.info(f"✅ Public check-in {checkin.id} for tenant {tenant.id}, position {position}")
        return tenant, checkin, position

    def update_checkin(self, checkin_id: int, data: CheckInUpdate, profile: Profile) -> CheckIn:
        checkin: Optional[CheckIn] = (
            self.db.query(CheckIn)
            .filter(CheckIn.id == checkin_id, CheckIn.tenant_id == profile.tenant_id)
            .first()
        )
        if not checkin:
            raise HTTPException(status_code=404, detail="Check-in not found")

        if data.status is not None:
            checkin.status = data.status
        if data.priority is not None:
            checkin.priority = data.priority

        self.db.commit()
        self.db.refresh(checkin)
        return checkin
