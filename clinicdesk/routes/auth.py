import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Profile, Tenant
from ..rate_limiter import AUTH_POLICY, create_rate_limiter
from ..services.auth_admin_service import create_auth_user
from ..shared.validators import check_password_strength, slugify, validate_email
from ..utils.sanitization import sanitize_string

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

register_rate_limit = create_rate_limiter(AUTH_POLICY, key_prefix="register")


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str
    clinicName: Optional[str] = Field(None, max_length=255)


class RegisterResponse(BaseModel):
    success: bool
    email: str
    tenantSlug: Optional[str] = None


def generate_unique_slug(db: Session, clinic_name: str) -> str:
    """Slug from the clinic name plus a random suffix, retried until unused"""
    base = slugify(clinic_name) or "clinic"
    for _ in range(10):
        candidate = f"{base[:40]}-{secrets.randbelow(1000)}"
        if not db.query(Tenant).filter(Tenant.slug == candidate).first():
            return candidate
    return f"{base[:40]}-{secrets.token_hex(4)}"


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    _: None = Depends(register_rate_limit),
):
    """Create a doctor account and, when a clinic name is given, the clinic itself"""
    try:
        email = validate_email(data.email)
    except ValueError as e:
        raise HTTPException(status_code=400, detail="Invalid email") from e
    if not email:
        raise HTTPException(status_code=400, detail="Invalid email")

    strength = check_password_strength(data.password)
    if not strength.is_valid:
        raise HTTPException(
            status_code=400,
            detail={"message": "Weak password", "feedback": strength.feedback},
        )

    if len(data.name.strip()) < 3:
        raise HTTPException(status_code=400, detail="Invalid name")

    safe_name = sanitize_string(data.name)
    safe_clinic_name = sanitize_string(data.clinicName) if data.clinicName else None

    auth_user_id = await create_auth_user(email, data.password, safe_name)

    tenant = None
    if safe_clinic_name:
        tenant = Tenant(
            name=safe_clinic_name,
            slug=generate_unique_slug(db, data.clinicName),
            owner_auth_id=auth_user_id,
            status="active",
            plan="trial",
        )
        db.add(tenant)

    profile = Profile(
        auth_user_id=auth_user_id,
        email=email,
        full_name=safe_name,
        role="doctor",
        tenant=tenant,
    )
    db.add(profile)

    try:
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to create clinic for {email}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create clinic") from e

    logger.info(f"✅ Registered {email}" + (f" with clinic {tenant.slug}" if tenant else ""))
    return RegisterResponse(success=True, email=email, tenantSlug=tenant.slug if tenant else None)
