"""
Admission Service

Runs every student/faculty action as read snapshot -> policy check -> write.

FLOW:
1. Read the records the decision depends on from MongoDB
2. Ask the policy engine (admission_policy) whether the action is allowed
3. Denied: log and raise AdmissionDenied, nothing is written
4. Allowed: perform the (conditional) write through mongo_service

Dashboards are rebuilt from a fresh snapshot on every call; nothing is
cached between requests.
"""

from typing import Dict, List, Optional

from capstone_portal.core.errors import AdmissionDenied
from capstone_portal.core.logger import get_logger
from capstone_portal.schemas.schemas import (
    Application, ApplicationResponse, ApplicationStatus, CategoryIntake, Decision,
    FacultyApplicationView, FacultyCard, FacultyDashboardResponse, FacultyListResponse,
    IntakeResponse, SlotSummary, StudentDetails, StudentType, UserProfile
)
from capstone_portal.services.admission_policy import (
    MAX_APPLICATIONS, DenialReason, PolicyDecision, accepted_counts_for_faculty,
    applied_set_for_student, bucket_by_status, build_application, can_apply,
    can_withdraw, decide_application, remaining_slots
)
from capstone_portal.services.mongo_service import ApplicationService, UserService

logger = get_logger("admission_service")

MISSING_NAME = "N/A"


def _enforce(decision: PolicyDecision, action: str, **context) -> None:
    if not decision:
        logger.warning("Admission action denied", action=action, reason=decision.reason.value, **context)
        raise AdmissionDenied(decision.reason)


def to_application_response(
    application: Application,
    student: Optional[UserProfile] = None,
    faculty: Optional[UserProfile] = None,
) -> ApplicationResponse:
    """Join display names; a missing profile falls back to the stored snapshot, then "N/A"."""
    student_name = (student.name if student else None) or application.student_name or MISSING_NAME
    faculty_name = (faculty.name if faculty else None) or application.faculty_name or MISSING_NAME
    return ApplicationResponse(
        id=application.id,
        student_id=application.student_id,
        faculty_id=application.faculty_id,
        student_name=student_name,
        faculty_name=faculty_name,
        student_type=application.student_type,
        status=application.status,
        reason=application.reason,
        applied_at=application.applied_at,
        decided_at=application.decided_at,
    )


def to_student_details(application: Application, student: Optional[UserProfile]) -> StudentDetails:
    if student is None:
        return StudentDetails(name=application.student_name or MISSING_NAME)
    return StudentDetails(
        name=student.name or MISSING_NAME,
        registration_number=student.registration_number,
        student_type=student.student_type,
        cgpa=student.cgpa,
        bio=student.bio,
        team_members=student.team_members,
    )


class AdmissionService:
    """Student and faculty actions on applications."""

    def __init__(
        self,
        users: Optional[UserService] = None,
        applications: Optional[ApplicationService] = None,
    ):
        self.users = users if users is not None else UserService()
        self.applications = applications if applications is not None else ApplicationService()

    # ------------------------------------------------------------
    # Student actions
    # ------------------------------------------------------------

    def apply(self, student: UserProfile, faculty_id: str, reason: Optional[str] = None) -> Application:
        """Create a pending application from `student` to `faculty_id`."""
        faculty = self.users.get(faculty_id)
        if faculty is None:
            _enforce(PolicyDecision(False, DenialReason.not_a_faculty), "apply",
                     student_id=student.id, faculty_id=faculty_id)

        snapshot = self.applications.by_student(student.id) + self.applications.accepted_for_faculty(faculty.id)
        _enforce(can_apply(student, faculty, snapshot), "apply",
                 student_id=student.id, faculty_id=faculty.id)

        try:
            application = self.applications.insert(build_application(student, faculty, reason))
        except AdmissionDenied as e:
            logger.warning("Apply lost a race", student_id=student.id,
                           faculty_id=faculty.id, reason=e.reason.value)
            raise
        logger.info(
            "Application submitted",
            application_id=application.id,
            student_id=student.id,
            faculty_id=faculty.id,
            student_type=application.student_type.value if application.student_type else None,
        )
        return application

    def withdraw(self, student: UserProfile, faculty_id: str) -> None:
        """Delete the student's application to `faculty_id`."""
        application_id = Application.key(student.id, faculty_id)
        application = self.applications.get(application_id)
        _enforce(can_withdraw(application, student), "withdraw",
                 student_id=student.id, application_id=application_id)

        if not self.applications.withdraw(application_id, student.id):
            # Accepted or removed between the read and the delete
            current = self.applications.get(application_id)
            reason = DenialReason.not_found if current is None else DenialReason.application_accepted
            _enforce(PolicyDecision(False, reason), "withdraw",
                     student_id=student.id, application_id=application_id)

        logger.info("Application withdrawn", application_id=application_id, student_id=student.id)

    def slot_summary(self, student: UserProfile, applications: Optional[List[Application]] = None) -> SlotSummary:
        apps = applications if applications is not None else self.applications.by_student(student.id)
        remaining = remaining_slots(apps, student.id)
        return SlotSummary(
            max_applications=MAX_APPLICATIONS,
            used=MAX_APPLICATIONS - remaining,
            remaining=remaining,
            is_accepted=student.is_accepted,
        )

    def student_applications(self, student: UserProfile) -> List[ApplicationResponse]:
        apps = self.applications.by_student(student.id)
        faculty = self.users.get_many(app.faculty_id for app in apps)
        return [to_application_response(app, student, faculty.get(app.faculty_id)) for app in apps]

    def student_dashboard(
        self,
        student: UserProfile,
        search: Optional[str] = None,
        domain: Optional[str] = None,
    ) -> FacultyListResponse:
        """Faculty to browse, the domain filter options, and the student's slot usage."""
        all_faculty = self.users.list_faculty()
        shown = self.users.list_faculty(search=search, domain=domain) if (search or domain) else all_faculty

        domains = sorted({d for f in all_faculty for d in f.faculty_domains})
        apps = self.applications.by_student(student.id)
        applied = applied_set_for_student(apps, student.id)

        cards = [
            FacultyCard(
                id=f.id,
                name=f.name or "Faculty",
                bio=f.bio,
                faculty_department=f.faculty_department,
                faculty_domains=f.faculty_domains,
                applied=f.id in applied,
            )
            for f in shown
        ]
        return FacultyListResponse(faculty=cards, domains=domains, slots=self.slot_summary(student, apps))

    # ------------------------------------------------------------
    # Faculty actions
    # ------------------------------------------------------------

    def _accepted_counts(self, faculty: UserProfile) -> Dict[StudentType, int]:
        return accepted_counts_for_faculty(self.applications.accepted_for_faculty(faculty.id), faculty.id)

    def accept(self, faculty: UserProfile, application_id: str) -> Application:
        """
        Accept an application: the student is placed with this faculty and
        all of the student's other applications are removed, atomically.
        """
        application = self.applications.get(application_id)
        student = self.users.get(application.student_id) if application else None
        if application is not None and student is None:
            _enforce(PolicyDecision(False, DenialReason.not_found), "accept",
                     faculty_id=faculty.id, application_id=application_id)

        decision = decide_application(
            application, Decision.accept, faculty, self._accepted_counts(faculty), student
        )
        _enforce(decision, "accept", faculty_id=faculty.id, application_id=application_id)

        try:
            self.applications.accept_cascade(application, faculty)
        except AdmissionDenied as e:
            logger.warning("Accept lost a race", application_id=application_id,
                           faculty_id=faculty.id, reason=e.reason.value)
            raise

        logger.info("Application accepted", application_id=application_id,
                    student_id=application.student_id, faculty_id=faculty.id)
        return self.applications.get(application_id)

    def reject(self, faculty: UserProfile, application_id: str) -> Application:
        application = self.applications.get(application_id)
        decision = decide_application(application, Decision.reject, faculty, {})
        _enforce(decision, "reject", faculty_id=faculty.id, application_id=application_id)

        if not self.applications.reject(application_id, faculty.id):
            _enforce(PolicyDecision(False, DenialReason.not_pending), "reject",
                     faculty_id=faculty.id, application_id=application_id)

        logger.info("Application rejected", application_id=application_id, faculty_id=faculty.id)
        return self.applications.get(application_id)

    def faculty_dashboard(self, faculty: UserProfile) -> FacultyDashboardResponse:
        """Applications received, split into pending/accepted/rejected with student details."""
        apps = self.applications.by_faculty(faculty.id)
        students = self.users.get_many(app.student_id for app in apps)
        buckets = bucket_by_status(apps)

        def views(status: ApplicationStatus) -> List[FacultyApplicationView]:
            return [
                FacultyApplicationView(
                    application=to_application_response(app, students.get(app.student_id), faculty),
                    student=to_student_details(app, students.get(app.student_id)),
                )
                for app in buckets[status]
            ]

        return FacultyDashboardResponse(
            pending=views(ApplicationStatus.pending),
            accepted=views(ApplicationStatus.accepted),
            rejected=views(ApplicationStatus.rejected),
            counts={status.name: len(buckets[status]) for status in ApplicationStatus},
        )

    def intake(self, faculty: UserProfile) -> IntakeResponse:
        counts = self._accepted_counts(faculty)
        categories = {}
        for student_type in StudentType:
            limit = faculty.limit_for(student_type)
            accepted = counts.get(student_type, 0)
            categories[student_type] = CategoryIntake(
                accepted=accepted,
                limit=limit,
                unlimited=limit <= 0,
                remaining=max(limit - accepted, 0) if limit > 0 else None,
            )
        return IntakeResponse(categories=categories)


def get_admission_service() -> AdmissionService:
    """Get admission service instance."""
    return AdmissionService()
