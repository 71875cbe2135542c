"""
Unit tests for profile setup and settings.
"""

from unittest.mock import MagicMock

import pytest

from capstone_portal.core.errors import ProfileRejected
from capstone_portal.schemas.schemas import (
    FacultyProfileUpdate, ProfileSetup, StudentProfileUpdate, TeamMember, UserProfile
)
from capstone_portal.services.profile_service import ProfileService
from tests.factories import make_faculty, make_student


FACULTY_SETUP = {
    "role": "faculty", "name": "Dr. Meera", "empId": "EMP1",
    "facultyDepartment": ["IT"], "facultyDomains": ["AI"],
}


@pytest.fixture
def users():
    users = MagicMock()
    users.update_fields.side_effect = lambda user_id, fields: UserProfile(id=user_id)
    return users


@pytest.fixture
def reference():
    reference = MagicMock()
    reference.departments.return_value = ["CSE", "IT"]
    reference.domains.return_value = ["AI", "Networks"]
    return reference


@pytest.fixture
def profiles(users, reference):
    return ProfileService(users=users, reference=reference)


class TestSetup:
    def test_first_setup_writes_role_fields(self, profiles, users):
        profiles.setup(UserProfile(id="u1"), ProfileSetup.model_validate(FACULTY_SETUP))

        user_id, fields = users.update_fields.call_args[0]
        assert user_id == "u1"
        assert fields["role"] == "faculty"
        assert fields["facultyDomains"] == ["AI"]
        assert "isAccepted" not in fields

    def test_role_cannot_change(self, profiles, users):
        with pytest.raises(ProfileRejected) as exc:
            profiles.setup(make_student("u1"), ProfileSetup.model_validate(FACULTY_SETUP))

        assert exc.value.status_code == 409
        users.update_fields.assert_not_called()

    def test_unknown_domain(self, profiles):
        data = ProfileSetup.model_validate({**FACULTY_SETUP, "facultyDomains": ["Astrology"]})

        with pytest.raises(ProfileRejected, match="Astrology"):
            profiles.setup(UserProfile(id="u1"), data)

    def test_unseeded_reference_lists_accept_anything(self, users, reference):
        reference.domains.return_value = []
        profiles = ProfileService(users=users, reference=reference)

        profiles.setup(
            UserProfile(id="u1"),
            ProfileSetup.model_validate({**FACULTY_SETUP, "facultyDomains": ["Astrology"]}),
        )

        users.update_fields.assert_called_once()


class TestUpdates:
    def test_student_update_only_given_fields(self, profiles, users):
        profiles.update_student(make_student(), StudentProfileUpdate.model_validate({"cgpa": 9.1}))

        assert users.update_fields.call_args[0] == ("s1", {"cgpa": 9.1})

    def test_empty_update_rejected(self, profiles):
        with pytest.raises(ProfileRejected):
            profiles.update_student(make_student(), StudentProfileUpdate())

    def test_faculty_limits_update(self, profiles, users):
        profiles.update_faculty(make_faculty(), FacultyProfileUpdate.model_validate({"ugLimit": 4, "pgLimit": 0}))

        assert users.update_fields.call_args[0][1] == {"ugLimit": 4, "pgLimit": 0}

    def test_team_size_change_rewrites_members(self, profiles, users):
        student = make_student(team_size=3, team_members=[
            TeamMember(name="Ravi", registration_number="21BCE0002"),
            TeamMember(name="Lena", registration_number="21BCE0003"),
        ])

        profiles.update_student(student, StudentProfileUpdate.model_validate({"teamSize": 1}))

        assert users.update_fields.call_args[0][1] == {"teamSize": 1, "teamMembers": []}
