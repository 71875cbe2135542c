"""
Student Routes

GET /students/faculty - Browse faculty (search by name, filter by domain)
GET /students/slots - Application slots used / remaining
GET /students/applications - Get my applications
POST /students/applications - Apply to a faculty member
DELETE /students/applications/{faculty_id} - Withdraw an application
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from capstone_portal.core.auth import get_current_student
from capstone_portal.schemas.schemas import (
    ApplicationCreate, ApplicationResponse, FacultyListResponse, MessageResponse,
    SlotSummary, UserProfile
)
from capstone_portal.services.admission_service import (
    AdmissionService, get_admission_service, to_application_response
)

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("/faculty", response_model=FacultyListResponse)
async def browse_faculty(
    search: Optional[str] = Query(None, description="Search faculty by name"),
    domain: Optional[str] = Query(None, description="Filter by domain"),
    student: UserProfile = Depends(get_current_student),
    admissions: AdmissionService = Depends(get_admission_service),
):
    """Faculty profiles with an `applied` flag, the domain filter options and slot usage."""
    return admissions.student_dashboard(student, search=search, domain=domain)


@router.get("/slots", response_model=SlotSummary)
async def get_slots(
    student: UserProfile = Depends(get_current_student),
    admissions: AdmissionService = Depends(get_admission_service),
):
    return admissions.slot_summary(student)


@router.get("/applications", response_model=List[ApplicationResponse])
async def get_my_applications(
    student: UserProfile = Depends(get_current_student),
    admissions: AdmissionService = Depends(get_admission_service),
):
    """Get all applications for current student."""
    return admissions.student_applications(student)


@router.post("/applications", response_model=ApplicationResponse, status_code=201)
async def apply_to_faculty(
    data: ApplicationCreate,
    student: UserProfile = Depends(get_current_student),
    admissions: AdmissionService = Depends(get_admission_service),
):
    """
    Apply to a faculty member.

    Denied (409) when already applied, when 5 applications are already held,
    when the faculty has no places left for the student's category, or when
    the student is already accepted.
    """
    application = admissions.apply(student, data.faculty_id, data.reason)
    return to_application_response(application, student)


@router.delete("/applications/{faculty_id}", response_model=MessageResponse)
async def withdraw_application(
    faculty_id: str,
    student: UserProfile = Depends(get_current_student),
    admissions: AdmissionService = Depends(get_admission_service),
):
    """Withdraw an application. Accepted placements cannot be withdrawn."""
    admissions.withdraw(student, faculty_id)
    return MessageResponse(message="Application withdrawn")
