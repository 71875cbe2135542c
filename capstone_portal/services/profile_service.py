"""
Profile Service - profile setup and settings.

A user record starts with role "" after the first login. Setup picks the
role once and fills that role's attributes; later edits go through the
role-specific update methods. Placement fields (isAccepted,
acceptedFacultyId) are never written here.
"""

from typing import List, Optional

from fastapi import status

from capstone_portal.core.errors import ProfileRejected
from capstone_portal.core.logger import get_logger
from capstone_portal.schemas.schemas import (
    FacultyProfileUpdate, ProfileSetup, Role, StudentProfileUpdate, UserProfile
)
from capstone_portal.services.mongo_service import ReferenceListService, UserService

logger = get_logger("profile_service")


class ProfileService:
    def __init__(
        self,
        users: Optional[UserService] = None,
        reference: Optional[ReferenceListService] = None,
    ):
        self.users = users if users is not None else UserService()
        self.reference = reference if reference is not None else ReferenceListService()

    def _check_reference(self, departments: Optional[List[str]], domains: Optional[List[str]]) -> None:
        # An empty reference list means the deployment has not seeded one; anything goes
        if departments:
            known = set(self.reference.departments())
            unknown = [d for d in departments if known and d not in known]
            if unknown:
                raise ProfileRejected(f"Unknown department(s): {', '.join(unknown)}")
        if domains:
            known = set(self.reference.domains())
            unknown = [d for d in domains if known and d not in known]
            if unknown:
                raise ProfileRejected(f"Unknown domain(s): {', '.join(unknown)}")

    def setup(self, user: UserProfile, data: ProfileSetup) -> UserProfile:
        """Complete (or re-submit) the profile for the chosen role."""
        if user.role is not Role.unset and user.role is not data.role:
            raise ProfileRejected(
                f"Role is already set to {user.role.value}", status.HTTP_409_CONFLICT
            )
        if data.role is Role.faculty:
            self._check_reference(data.faculty_department, data.faculty_domains)

        profile = self.users.update_fields(user.id, data.profile_fields())
        logger.info("Profile saved", user_id=user.id, role=data.role.value)
        return profile

    def update_student(self, student: UserProfile, data: StudentProfileUpdate) -> UserProfile:
        fields = data.model_dump(by_alias=True, exclude_none=True, mode="json")
        if not fields:
            raise ProfileRejected("No fields to update")
        profile = self.users.update_fields(student.id, fields)
        logger.info("Student profile updated", user_id=student.id, fields=sorted(fields))
        return profile

    def update_faculty(self, faculty: UserProfile, data: FacultyProfileUpdate) -> UserProfile:
        fields = data.model_dump(by_alias=True, exclude_none=True, mode="json")
        if not fields:
            raise ProfileRejected("No fields to update")
        self._check_reference(data.faculty_department, data.faculty_domains)
        profile = self.users.update_fields(faculty.id, fields)
        logger.info("Faculty profile updated", user_id=faculty.id, fields=sorted(fields))
        return profile


def get_profile_service() -> ProfileService:
    """Get profile service instance."""
    return ProfileService()
