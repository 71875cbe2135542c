"""
API tests with FastAPI's TestClient; services replaced through dependency overrides.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from capstone_portal.api.routes.reference_routes import get_reference_service
from capstone_portal.core.auth import (
    get_current_faculty, get_current_student, get_current_user, get_identity, get_user_service
)
from capstone_portal.core.errors import AdmissionDenied, STORE_UNAVAILABLE_MESSAGE
from capstone_portal.main import app
from capstone_portal.schemas.schemas import (
    ApplicationStatus, FacultyListResponse, IdentitySession, Role, SlotSummary, UserProfile
)
from capstone_portal.services.admission_policy import DenialReason
from capstone_portal.services.admission_service import get_admission_service
from capstone_portal.services.profile_service import get_profile_service
from tests.factories import make_application, make_faculty, make_student


@pytest.fixture
def admissions():
    return MagicMock()


@pytest.fixture
def client(admissions):
    student = make_student()
    faculty = make_faculty()
    app.dependency_overrides[get_current_student] = lambda: student
    app.dependency_overrides[get_current_faculty] = lambda: faculty
    app.dependency_overrides[get_admission_service] = lambda: admissions
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestStudentRoutes:
    def test_apply_returns_created(self, client, admissions):
        admissions.apply.return_value = make_application(reason="Compilers")

        response = client.post("/api/students/applications", json={"facultyId": "f1", "reason": "Compilers"})

        assert response.status_code == 201
        body = response.json()
        assert body["id"] == "s1_f1"
        assert body["status"] == "pending"
        assert body["studentType"] == "ug"
        admissions.apply.assert_called_once()
        assert admissions.apply.call_args[0][1:] == ("f1", "Compilers")

    def test_apply_denied_is_conflict(self, client, admissions):
        admissions.apply.side_effect = AdmissionDenied(DenialReason.slot_cap_reached)

        response = client.post("/api/students/applications", json={"facultyId": "f6"})

        assert response.status_code == 409
        assert response.json()["code"] == "slot_cap_reached"
        assert "at most 5" in response.json()["detail"]

    def test_reason_length_validated(self, client):
        response = client.post("/api/students/applications", json={"facultyId": "f1", "reason": "x" * 1001})

        assert response.status_code == 422

    def test_withdraw_not_found(self, client, admissions):
        admissions.withdraw.side_effect = AdmissionDenied(DenialReason.not_found)

        response = client.delete("/api/students/applications/f1")

        assert response.status_code == 404

    def test_withdraw(self, client, admissions):
        response = client.delete("/api/students/applications/f1")

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_browse_faculty_passes_filters(self, client, admissions):
        admissions.student_dashboard.return_value = FacultyListResponse(
            faculty=[],
            domains=["AI"],
            slots=SlotSummary(max_applications=5, used=0, remaining=5, is_accepted=False),
        )

        response = client.get("/api/students/faculty", params={"search": "mee", "domain": "AI"})

        assert response.status_code == 200
        assert response.json()["slots"]["maxApplications"] == 5
        kwargs = admissions.student_dashboard.call_args.kwargs
        assert kwargs == {"search": "mee", "domain": "AI"}

    def test_store_failure_is_503(self, client, admissions):
        admissions.student_applications.side_effect = ServerSelectionTimeoutError("no primary")

        response = client.get("/api/students/applications")

        assert response.status_code == 503
        assert response.json()["detail"] == STORE_UNAVAILABLE_MESSAGE


class TestFacultyRoutes:
    def test_accept(self, client, admissions):
        admissions.accept.return_value = make_application(status=ApplicationStatus.accepted)

        response = client.post("/api/faculty/applications/s1_f1/accept")

        assert response.status_code == 200
        assert response.json()["status"] == "Accepted"

    def test_accept_limit_reached(self, client, admissions):
        admissions.accept.side_effect = AdmissionDenied(DenialReason.limit_reached)

        response = client.post("/api/faculty/applications/s3_f1/accept")

        assert response.status_code == 409
        assert response.json()["code"] == "limit_reached"

    def test_reject_other_faculty_forbidden(self, client, admissions):
        admissions.reject.side_effect = AdmissionDenied(DenialReason.not_owner)

        response = client.post("/api/faculty/applications/s1_f2/reject")

        assert response.status_code == 403


class TestSessionRoutes:
    def test_first_login_goes_to_profile_setup(self):
        users = MagicMock()
        users.ensure_user.return_value = UserProfile(id="u1", email="u1@x.edu", role=Role.unset)
        app.dependency_overrides[get_identity] = lambda: IdentitySession(
            id="u1", email="u1@x.edu", display_name="U One"
        )
        app.dependency_overrides[get_user_service] = lambda: users
        try:
            response = TestClient(app).post("/api/auth/session")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert response.json()["next"] == "profile-setup"
        assert response.json()["displayName"] == "U One"

    def test_missing_token_rejected(self):
        response = TestClient(app).get("/api/auth/me")

        assert response.status_code in (401, 403)


class TestProfileAndReferenceRoutes:
    def test_setup_validation_error(self):
        app.dependency_overrides[get_current_user] = lambda: UserProfile(id="u1")
        app.dependency_overrides[get_profile_service] = lambda: MagicMock()
        try:
            response = TestClient(app).post(
                "/api/profile/setup",
                json={"role": "student", "name": "A", "registrationNumber": "123", "studentType": "ug",
                      "cgpa": 8, "bio": "b"},
            )
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 422

    def test_setup_saves(self):
        profiles = MagicMock()
        profiles.setup.return_value = make_faculty("u1")
        app.dependency_overrides[get_current_user] = lambda: UserProfile(id="u1")
        app.dependency_overrides[get_profile_service] = lambda: profiles
        try:
            response = TestClient(app).post(
                "/api/profile/setup",
                json={"role": "faculty", "name": "Dr. u1", "empId": "E1",
                      "facultyDepartment": ["IT"], "facultyDomains": ["AI"], "ugLimit": 2},
            )
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert response.json()["role"] == "faculty"
        assert profiles.setup.call_args[0][1].ug_limit == 2

    def test_domains(self):
        reference = MagicMock()
        reference.domains.return_value = ["AI", "Networks"]
        app.dependency_overrides[get_reference_service] = lambda: reference
        try:
            response = TestClient(app).get("/api/reference/domains")
        finally:
            app.dependency_overrides.clear()

        assert response.json() == ["AI", "Networks"]
