"""
AI scribe - turns a consultation transcript into a SOAP note
(Subjective, Objective, Assessment, Plan) using the configured LLM provider
"""

import json
import logging
from typing import Any, Optional

import httpx

from ..config import (
    AI_PROVIDER,
    AI_REQUEST_TIMEOUT,
    GOOGLE_AI_API_KEY,
    GOOGLE_AI_MODEL,
    OPENAI_API_KEY,
    OPENAI_MODEL,
)

logger = logging.getLogger(__name__)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

SYSTEM_PROMPT = """You are a medical assistant specialized in writing precise, detailed SOAP notes \
(Subjective, Objective, Assessment, Plan) in Brazilian Portuguese.

Instructions:
- Analyze the consultation transcript
- Extract the relevant information for each SOAP section
- Be objective and use appropriate medical terminology
- Keep the formatting clear and professional
- If information is missing, say so explicitly

Expected format:
**S (Subjetivo):**
[Patient complaints, history, reported symptoms]

**O (Objetivo):**
[Physical exam, vital signs, clinical observations]

**A (Avaliação):**
[Diagnostic hypothesis, clinical analysis]

**P (Plano):**
[Treatment, prescriptions, guidance, follow-up]"""


class AIProviderNotConfigured(Exception):
    """No API key is set for any supported provider"""


class AIProviderError(Exception):
    """The provider answered with an error"""


def build_user_prompt(transcript: str, patient_name: Optional[str], context: Optional[dict[str, Any]]) -> str:
    lines = [f"Patient: {patient_name or 'Not identified'}"]
    if context:
        lines.append(f"Additional context: {json.dumps(context, ensure_ascii=False)}")
    lines.append("")
    lines.append("Consultation transcript:")
    lines.append(transcript)
    lines.append("")
    lines.append("Write a complete, professional SOAP note based on this consultation.")
    return "\n".join(lines)


async def _generate_with_openai(client: httpx.AsyncClient, prompt: str) -> str:
    response = await client.post(
        OPENAI_URL,
        headers={"Authorization": f"Bearer {OPENAI_API_KEY}"},
        json={
            "model": OPENAI_MODEL,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.3,
            "max_tokens": 1500,
        },
    )
    if response.status_code != 200:
        raise AIProviderError(f"OpenAI API error: HTTP {response.status_code}")

    data = response.json()
    choices = data.get("choices") or []
    if not choices:
        raise AIProviderError("OpenAI API returned no choices")
    return choices[0]["message"]["content"]


async def _generate_with_gemini(client: httpx.AsyncClient, prompt: str) -> str:
    response = await client.post(
        GEMINI_URL.format(model=GOOGLE_AI_MODEL),
        params={"key": GOOGLE_AI_API_KEY},
        json={
            "contents": [{"parts": [{"text": f"{SYSTEM_PROMPT}\n\n{prompt}"}]}],
            "generationConfig": {"temperature": 0.3, "maxOutputTokens": 1500},
        },
    )
    if response.status_code != 200:
        raise AIProviderError(f"Gemini API error: HTTP {response.status_code}")

    data = response.json()
    candidates = data.get("candidates") or []
    if not candidates:
        raise AIProviderError("Gemini API returned no candidates")
    return candidates[0]["content"]["parts"][0]["text"]


async def generate_soap_note(
    transcript: str,
    patient_name: Optional[str] = None,
    context: Optional[dict[str, Any]] = None,
) -> str:
    """
    Generate a SOAP note with Gemini when AI_PROVIDER=google and a key is set,
    otherwise with OpenAI.

    Raises:
        AIProviderNotConfigured: no usable provider key
        AIProviderError: the provider call failed
    """
    prompt = build_user_prompt(transcript, patient_name, context)

    async with httpx.AsyncClient(timeout=AI_REQUEST_TIMEOUT) as client:
        try:
            if AI_PROVIDER == "google" and GOOGLE_AI_API_KEY:
                logger.info("🤖 Generating SOAP note with Gemini")
                return await _generate_with_gemini(client, prompt)
            if OPENAI_API_KEY:
                logger.info("🤖 Generating SOAP note with OpenAI")
                return await _generate_with_openai(client, prompt)
        except httpx.HTTPError as e:
            raise AIProviderError(f"AI provider unreachable: {str(e)}") from e

    raise AIProviderNotConfigured("Set OPENAI_API_KEY or GOOGLE_AI_API_KEY")
