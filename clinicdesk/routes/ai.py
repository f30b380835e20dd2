import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..auth import get_current_tenant_profile
from ..models import Profile
from ..rate_limiter import AI_API_POLICY, create_rate_limiter
from ..services.soap_note_service import (
    AIProviderError,
    AIProviderNotConfigured,
    generate_soap_note,
)
from ..utils.sanitization import sanitize_string, validate_and_sanitize_input

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["AI"])

soap_rate_limit = create_rate_limiter(AI_API_POLICY, key_prefix="soap")


class PatientContext(BaseModel):
    age: Optional[int] = Field(None, ge=0, le=150)
    allergies: list[str] = []
    medications: list[str] = []


class SOAPNoteRequest(BaseModel):
    transcript: str
    patientName: Optional[str] = None
    patientContext: Optional[PatientContext] = None


class SOAPNoteResponse(BaseModel):
    soapNote: str


@router.post("/soap-note", response_model=SOAPNoteResponse)
async def create_soap_note(
    data: SOAPNoteRequest,
    _: None = Depends(soap_rate_limit),
    current_profile: Profile = Depends(get_current_tenant_profile),
):
    """Generate a SOAP clinical note from a consultation transcript"""
    if not data.transcript or not data.transcript.strip():
        raise HTTPException(status_code=400, detail="Transcript is required and cannot be empty")

    try:
        transcript = validate_and_sanitize_input(data.transcript, max_length=50000)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    patient_name = sanitize_string(data.patientName) if data.patientName else None
    context = data.patientContext.model_dump(exclude_none=True) if data.patientContext else None

    try:
        soap_note = await generate_soap_note(transcript, patient_name, context)
    except AIProviderNotConfigured as e:
        logger.error(f"❌ No AI provider configured: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail="No AI provider configured. Please set OPENAI_API_KEY or GOOGLE_AI_API_KEY",
        ) from e
    except AIProviderError as e:
        logger.error(f"❌ SOAP generation failed for tenant {current_profile.tenant_id}: {str(e)}")
        raise HTTPException(status_code=502, detail="Failed to generate SOAP note") from e

    return SOAPNoteResponse(soapNote=soap_note)
