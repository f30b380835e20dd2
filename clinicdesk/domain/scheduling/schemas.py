"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_br_phone, validate_cpf, validate_email
from .recurrence import RecurrenceRule

AppointmentStatus = Literal[
    "scheduled", "confirmed", "in_progress", "completed", "cancelled", "no_show", "blocked"
]
AppointmentType = Literal["presencial", "telemed"]


class AppointmentCreate(BaseModel):
    """Schema for creating an appointment, optionally repeating"""

    patientName: str = Field(..., min_length=1, max_length=255)
    patientPhone: Optional[str] = None
    patientEmail: Optional[str] = None
    startTime: datetime
    durationMinutes: int = Field(60, ge=5, le=720)
    type: AppointmentType = "presencial"
    status: AppointmentStatus = "scheduled"
    meetLink: Optional[str] = None
    notes: Optional[str] = None
    recurrence: Optional[RecurrenceRule] = None

    @field_validator("patientPhone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_br_phone(v)
        return v

    @field_validator("patientEmail")
    @classmethod
    def validate_patient_email(cls, v):
        if v:
            return validate_email(v)
        return v


class AppointmentUpdate(BaseModel):
    """Schema for updating a single appointment (never the whole series)"""

    patientName: Optional[str] = Field(None, min_length=1, max_length=255)
    patientPhone: Optional[str] = None
    patientEmail: Optional[str] = None
    startTime: Optional[datetime] = None
    durationMinutes: Optional[int] = Field(None, ge=5, le=720)
    type: Optional[AppointmentType] = None
    status: Optional[AppointmentStatus] = None
    meetLink: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("patientPhone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_br_phone(v)
        return v


class AppointmentResponse(BaseModel):
    id: int
    publicId: str
    patientName: str
    patientPhone: Optional[str]
    patientEmail: Optional[str]
    startTime: datetime
    endTime: datetime
    status: str
    type: str
    meetLink: Optional[str]
    notes: Optional[str]
    seriesId: Optional[str]


class AppointmentSeriesResponse(BaseModel):
    seriesId: Optional[str]
    count: int
    summary: str
    appointments: list[AppointmentResponse]


class RecurrencePreviewRequest(BaseModel):
    startTime: datetime
    recurrence: RecurrenceRule


class RecurrencePreviewResponse(BaseModel):
    occurrences: list[datetime]
    count: int
    summary: str


class PublicBookingCreate(BaseModel):
    """Schema for the public booking form"""

    patientName: str = Field(..., max_length=255)
    patientPhone: str
    patientCpf: Optional[str] = None
    startTime: datetime
    type: AppointmentType = "presencial"

    @field_validator("patientName")
    @classmethod
    def validate_name(cls, v):
        if len(v.strip()) < 3:
            raise ValueError("Name must have at least 3 characters")
        return v

    @field_validator("patientPhone")
    @classmethod
    def validate_phone(cls, v):
        return validate_br_phone(v)

    @field_validator("patientCpf")
    @classmethod
    def validate_patient_cpf(cls, v):
        if v:
            return validate_cpf(v)
        return v


class PublicBookingResponse(BaseModel):
    success: bool
    tenantName: str
    appointmentId: str
    startTime: datetime
    endTime: datetime
