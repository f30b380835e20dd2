"""Check-in domain schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_br_phone, validate_cpf

CheckInStatus = Literal["waiting", "in_progress", "completed", "cancelled"]
CheckInPriority = Literal["low", "normal", "high", "urgent"]


class PublicCheckInCreate(BaseModel):
    """Schema for the public check-in form"""

    patientName: str = Field(..., max_length=255)
    patientCpf: Optional[str] = None
    patientPhone: Optional[str] = None
    symptoms: Optional[str] = Field(None, max_length=2000)
    painLevel: int = Field(0, ge=0, le=10)

    @field_validator("patientName")
    @classmethod
    def validate_name(cls, v):
        if len(v.strip()) < 3:
            raise ValueError("Name must have at least 3 characters")
        return v

    @field_validator("patientCpf")
    @classmethod
    def validate_patient_cpf(cls, v):
        if v:
            return validate_cpf(v)
        return v

    @field_validator("patientPhone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_br_phone(v)
        return v


class CheckInUpdate(BaseModel):
    status: Optional[CheckInStatus] = None
    priority: Optional[CheckInPriority] = None


class CheckInResponse(BaseModel):
    id: int
    patientName: str
    patientCpf: Optional[str]
    patientPhone: Optional[str]
    symptoms: Optional[str]
    painLevel: int
    status: str
    priority: str
    createdAt: Optional[datetime] = None


class PublicCheckInResponse(BaseModel):
    success: bool
    tenantName: str
    position: int


class CheckInCreate(PublicCheckInCreate):
    """Schema for reception adding a walk-in"""

    priority: CheckInPriority = "normal"
