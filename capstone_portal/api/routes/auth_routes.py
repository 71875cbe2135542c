"""
Session Routes

POST /auth/session - Start a session from an identity-provider token
GET /auth/me - Get current user's stored record
"""

from fastapi import APIRouter, Depends

from capstone_portal.core.auth import get_current_user, get_identity, get_user_service
from capstone_portal.core.logger import get_logger
from capstone_portal.schemas.schemas import IdentitySession, Role, SessionResponse, UserProfile
from capstone_portal.services.mongo_service import UserService

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = get_logger("auth_routes")

NEXT_STEP = {
    Role.unset: "profile-setup",
    Role.student: "student-dashboard",
    Role.faculty: "faculty-dashboard",
}


@router.post("/session", response_model=SessionResponse)
async def start_session(
    identity: IdentitySession = Depends(get_identity),
    users: UserService = Depends(get_user_service),
):
    """
    Bootstrap a session after identity-provider sign-in.

    First login creates the user record with no role; `next` tells the
    client whether to show profile setup or a dashboard.
    """
    user = users.ensure_user(identity)
    logger.info("Session started", user_id=user.id, role=user.role.value)

    return SessionResponse(
        id=user.id,
        email=user.email or identity.email,
        display_name=identity.display_name,
        role=user.role,
        next=NEXT_STEP[user.role],
    )


@router.get("/me", response_model=UserProfile)
async def get_me(user: UserProfile = Depends(get_current_user)):
    """Get current authenticated user's record."""
    return user
