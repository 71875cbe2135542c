"""
Faculty Routes

GET /faculty/applications - Applications received, by status
GET /faculty/intake - Accepted students vs intake limit per category
POST /faculty/applications/{application_id}/accept - Accept an application
POST /faculty/applications/{application_id}/reject - Reject an application
"""

from fastapi import APIRouter, Depends

from capstone_portal.core.auth import get_current_faculty
from capstone_portal.schemas.schemas import (
    ApplicationResponse, FacultyDashboardResponse, IntakeResponse, UserProfile
)
from capstone_portal.services.admission_service import (
    AdmissionService, get_admission_service, to_application_response
)

router = APIRouter(prefix="/faculty", tags=["Faculty"])


@router.get("/applications", response_model=FacultyDashboardResponse)
async def get_applications(
    faculty: UserProfile = Depends(get_current_faculty),
    admissions: AdmissionService = Depends(get_admission_service),
):
    """Pending, accepted and rejected applications with student details."""
    return admissions.faculty_dashboard(faculty)


@router.get("/intake", response_model=IntakeResponse)
async def get_intake(
    faculty: UserProfile = Depends(get_current_faculty),
    admissions: AdmissionService = Depends(get_admission_service),
):
    return admissions.intake(faculty)


@router.post("/applications/{application_id}/accept", response_model=ApplicationResponse)
async def accept_application(
    application_id: str,
    faculty: UserProfile = Depends(get_current_faculty),
    admissions: AdmissionService = Depends(get_admission_service),
):
    """
    Accept an application.

    The student is placed with this faculty member and the student's other
    applications are removed in the same transaction. Denied (409) when the
    category limit is reached, the application is already decided, or the
    student was accepted elsewhere.
    """
    application = admissions.accept(faculty, application_id)
    return to_application_response(application, faculty=faculty)


@router.post("/applications/{application_id}/reject", response_model=ApplicationResponse)
async def reject_application(
    application_id: str,
    faculty: UserProfile = Depends(get_current_faculty),
    admissions: AdmissionService = Depends(get_admission_service),
):
    """Reject a pending application. The student may still apply elsewhere."""
    application = admissions.reject(faculty, application_id)
    return to_application_response(application, faculty=faculty)
