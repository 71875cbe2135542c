"""
Profile Routes

GET /profile - Get own profile
POST /profile/setup - Choose role and complete profile
PUT /profile/student - Update student settings
PUT /profile/faculty - Update faculty settings
"""

from fastapi import APIRouter, Depends

from capstone_portal.core.auth import get_current_faculty, get_current_student, get_current_user
from capstone_portal.schemas.schemas import (
    FacultyProfileUpdate, ProfileSetup, StudentProfileUpdate, UserProfile
)
from capstone_portal.services.profile_service import ProfileService, get_profile_service

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=UserProfile)
async def get_profile(user: UserProfile = Depends(get_current_user)):
    return user


@router.post("/setup", response_model=UserProfile)
async def setup_profile(
    data: ProfileSetup,
    user: UserProfile = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    """
    Complete profile setup.

    Students: registration number (9 characters), category, CGPA (0-10),
    bio, team size 1-5 with the other members' names and registration numbers.
    Faculty: employee id, departments, domains, optional per-category intake
    limits (0 = no limit).
    """
    return profiles.setup(user, data)


@router.put("/student", response_model=UserProfile)
async def update_student_profile(
    data: StudentProfileUpdate,
    student: UserProfile = Depends(get_current_student),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Update student settings. Only provided fields are updated."""
    return profiles.update_student(student, data)


@router.put("/faculty", response_model=UserProfile)
async def update_faculty_profile(
    data: FacultyProfileUpdate,
    faculty: UserProfile = Depends(get_current_faculty),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Update faculty settings, including intake limits."""
    return profiles.update_faculty(faculty, data)
