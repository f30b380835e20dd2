"""
Hosted auth admin API client
Creates users server-side so roles and metadata cannot be spoofed by the browser
"""

import logging

import httpx
from fastapi import HTTPException

from ..config import SUPABASE_SERVICE_ROLE_KEY, SUPABASE_URL

logger = logging.getLogger(__name__)


async def create_auth_user(email: str, password: str, full_name: str, role: str = "doctor") -> str:
    """
    Create a confirmed user in the hosted auth service.

    Returns:
        The new user's auth id
    """
    if not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY:
        logger.error("❌ SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not configured")
        raise HTTPException(status_code=500, detail="Authentication not configured")

    try:
        async with httpx.AsyncClient(timeout=15) as client:
            response = await client.post(
                f"{SUPABASE_URL.rstrip('/')}/auth/v1/admin/users",
                headers={
                    "apikey": SUPABASE_SERVICE_ROLE_KEY,
                    "Authorization": f"Bearer {SUPABASE_SERVICE_ROLE_KEY}",
                },
                json={
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": {"full_name": full_name, "role": role},
                },
            )
    except httpx.HTTPError as e:
        logger.error(f"❌ Auth admin API unreachable: {str(e)}")
        raise HTTPException(status_code=502, detail="Authentication service unavailable") from e

    if response.status_code >= 400:
        try:
            body = response.json()
        except ValueError:
            body = {}
        message = body.get("msg") or body.get("message") or body.get("error_description") or "Could not create account"
        logger.warning(f"⚠️ Auth admin API rejected user creation: HTTP {response.status_code} {message}")
        status_code = 400 if response.status_code < 500 else 502
        raise HTTPException(status_code=status_code, detail=message)

    user = response.json()
    # Some API versions wrap the user object
    user = user.get("user", user)
    logger.info(f"🆕 Auth user created: {email}")
    return user["id"]
