"""
Authentication Utility - identity-provider session tokens.

Sign-in happens at the external identity provider, which issues a signed
JWT. This module only verifies it and resolves the portal profile.

Provides:
- JWT verification (python-jose)
- FastAPI dependencies for protected routes (any user, students, faculty)
"""

from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from capstone_portal.core.config import get_settings
from capstone_portal.schemas.schemas import IdentitySession, Role, UserProfile
from capstone_portal.services.mongo_service import UserService

# Bearer token extractor
bearer_scheme = HTTPBearer()


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify an identity-provider JWT."""
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.identity_jwt_secret,
            algorithms=[settings.identity_jwt_algorithm],
            audience=settings.identity_jwt_audience,
            options={"verify_aud": settings.identity_jwt_audience is not None},
        )
    except JWTError:
        return None


def get_user_service() -> UserService:
    return UserService()


async def get_identity(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> IdentitySession:
    """
    FastAPI dependency - the verified identity-provider session.

    Claims used: sub (id), email, name (display name).
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if not payload:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    return IdentitySession(
        id=str(user_id),
        email=payload.get("email"),
        display_name=payload.get("name"),
    )


async def get_current_user(
    identity: IdentitySession = Depends(get_identity),
    users: UserService = Depends(get_user_service),
) -> UserProfile:
    """
    FastAPI dependency - Get the current user's stored profile.

    Usage:
        @app.get("/protected")
        async def route(user: UserProfile = Depends(get_current_user)):
            return user
    """
    user = users.get(identity.id)
    if not user:
        raise HTTPException(
            status_code=404, detail="User record not found. Start a session first."
        )
    return user


async def get_current_student(user: UserProfile = Depends(get_current_user)) -> UserProfile:
    """Dependency - Require a completed student profile."""
    if user.role is Role.unset:
        raise HTTPException(status_code=404, detail="Student profile not found. Complete profile setup first.")
    if not user.is_student:
        raise HTTPException(status_code=403, detail="Students only")
    return user


async def get_current_faculty(user: UserProfile = Depends(get_current_user)) -> UserProfile:
    """Dependency - Require a completed faculty profile."""
    if user.role is Role.unset:
        raise HTTPException(status_code=404, detail="Faculty profile not found. Complete profile setup first.")
    if not user.is_faculty:
        raise HTTPException(status_code=403, detail="Faculty only")
    return user
