import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from jose import jwt as jose_jwt
from sqlalchemy.orm import Session, joinedload

from .config import SUPABASE_JWT_AUDIENCE, SUPABASE_JWT_SECRET
from .database import get_db
from .models import Profile

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ALGORITHM = "HS256"


def verify_access_token(token: str) -> dict:
    """
    Verify an access token issued by the hosted auth service.
    Tokens are HS256 JWTs signed with the project's JWT secret.
    """
    if not SUPABASE_JWT_SECRET:
        logger.error("❌ SUPABASE_JWT_SECRET not configured")
        raise HTTPException(status_code=500, detail="Authentication not configured")

    try:
        payload = jose_jwt.decode(
            token,
            SUPABASE_JWT_SECRET,
            algorithms=[ALGORITHM],
            audience=SUPABASE_JWT_AUDIENCE,
        )
    except ExpiredSignatureError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTError as e:
        logger.warning(f"⚠️ Token verification failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token") from e

    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token claims")

    return payload


async def get_current_profile(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Profile:
    """Get the staff profile for the bearer token"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    payload = verify_access_token(credentials.credentials)
    auth_user_id = payload["sub"]

    profile = (
        db.query(Profile)
        .filter(Profile.auth_user_id == auth_user_id)
        .options(joinedload(Profile.tenant))
        .first()
    )
    if not profile:
        logger.warning(f"⚠️ No profile for auth user {auth_user_id}")
        raise HTTPException(status_code=403, detail="Profile not found")

    logger.debug(f"✅ User authenticated: {profile.email}")
    return profile


async def get_current_tenant_profile(
    profile: Profile = Depends(get_current_profile),
) -> Profile:
    """
    Require the profile to belong to an active clinic.
    Use this dependency for every tenant-scoped dashboard route.
    """
    if not profile.tenant_id or not profile.tenant:
        raise HTTPException(status_code=403, detail="No clinic linked to this account")

    if profile.tenant.status != "active":
        logger.warning(f"⚠️ Profile {profile.id} accessed suspended tenant {profile.tenant_id}")
        raise HTTPException(status_code=403, detail="Clinic account is not active")

    return profile
