"""
Pydantic Schemas - Records, Request/Response Validation

All store records and API schemas in one file for simplicity.
Field names are snake_case in Python and camelCase on the wire and in
MongoDB (the document shapes the portal has always used).
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


REGISTRATION_NUMBER_LENGTH = 9
MAX_TEAM_SIZE = 5
MAX_REASON_LENGTH = 1000


# ============================================================
# ENUMS
# ============================================================

class Role(str, Enum):
    unset = ""
    student = "student"
    faculty = "faculty"


class StudentType(str, Enum):
    ug = "ug"
    pg = "pg"
    masters = "masters"


class ApplicationStatus(str, Enum):
    pending = "pending"
    accepted = "Accepted"
    rejected = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ApplicationStatus.pending


class Decision(str, Enum):
    accept = "accept"
    reject = "reject"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# STORE RECORDS
# ============================================================

class TeamMember(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    registration_number: str = Field(
        ..., min_length=REGISTRATION_NUMBER_LENGTH, max_length=REGISTRATION_NUMBER_LENGTH
    )


class UserProfile(CamelModel):
    """A `users` document. Which attribute group is meaningful depends on `role`."""

    id: str
    email: Optional[str] = None
    role: Role = Role.unset
    name: Optional[str] = None
    bio: Optional[str] = None

    # Student
    registration_number: Optional[str] = None
    student_type: Optional[StudentType] = None
    cgpa: Optional[float] = None
    team_size: Optional[int] = None
    team_members: List[TeamMember] = []
    is_accepted: bool = False
    accepted_faculty_id: Optional[str] = None

    # Faculty
    emp_id: Optional[str] = None
    faculty_department: List[str] = []
    faculty_domains: List[str] = []
    ug_limit: int = 0
    pg_limit: int = 0
    masters_limit: int = 0

    @field_validator("student_type", "cgpa", "team_size", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        # Older documents store "" for fields of the other role
        return None if v == "" else v

    @field_validator("faculty_department", "faculty_domains", "team_members", mode="before")
    @classmethod
    def null_to_empty(cls, v):
        return [] if v is None else v

    @field_validator("ug_limit", "pg_limit", "masters_limit", mode="before")
    @classmethod
    def blank_limit_to_zero(cls, v):
        return 0 if v in (None, "") else v

    @property
    def is_student(self) -> bool:
        return self.role is Role.student

    @property
    def is_faculty(self) -> bool:
        return self.role is Role.faculty

    def limit_for(self, student_type: Optional[StudentType]) -> int:
        """Intake limit for a category. 0 means no cap."""
        if student_type is None:
            return 0
        return {
            StudentType.ug: self.ug_limit,
            StudentType.pg: self.pg_limit,
            StudentType.masters: self.masters_limit,
        }[student_type]

    @classmethod
    def from_document(cls, doc: Optional[dict]) -> Optional["UserProfile"]:
        if doc is None:
            return None
        data = dict(doc)
        data["id"] = str(data.pop("_id", data.get("id", data.get("uid"))))
        data.pop("uid", None)
        return cls.model_validate(data)


class Application(CamelModel):
    """A `facultyApplications` document keyed by `{studentId}_{facultyId}`."""

    id: str
    student_id: str
    faculty_id: str
    student_type: Optional[StudentType] = None
    status: ApplicationStatus = ApplicationStatus.pending
    reason: Optional[str] = None
    student_name: Optional[str] = None
    faculty_name: Optional[str] = None
    applied_at: datetime
    decided_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        # Earlier revisions wrote "Pending"/"accepted"; canonical casing is fixed here
        if isinstance(v, str):
            lowered = v.lower()
            if lowered == "pending":
                return ApplicationStatus.pending
            if lowered == "accepted":
                return ApplicationStatus.accepted
            if lowered == "rejected":
                return ApplicationStatus.rejected
        return v

    @field_validator("student_type", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return None if v == "" else v

    @staticmethod
    def key(student_id: str, faculty_id: str) -> str:
        return f"{student_id}_{faculty_id}"

    @classmethod
    def from_document(cls, doc: Optional[dict]) -> Optional["Application"]:
        if doc is None:
            return None
        data = dict(doc)
        data["id"] = str(data.pop("_id", data.get("id")))
        return cls.model_validate(data)

    def to_document(self) -> dict:
        doc = self.model_dump(by_alias=True)
        doc["_id"] = doc.pop("id")
        doc["status"] = self.status.value
        doc["studentType"] = self.student_type.value if self.student_type else None
        return doc


# ============================================================
# SESSION SCHEMAS
# ============================================================

class IdentitySession(CamelModel):
    """Session object issued by the identity provider."""
    id: str
    email: Optional[EmailStr] = None
    display_name: Optional[str] = None


class SessionResponse(CamelModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    role: Role
    next: str


# ============================================================
# PROFILE SCHEMAS
# ============================================================

def _check_registration_number(v: Optional[str]) -> Optional[str]:
    if v is not None and len(v) != REGISTRATION_NUMBER_LENGTH:
        raise ValueError(
            f"Registration number must be exactly {REGISTRATION_NUMBER_LENGTH} characters"
        )
    return v


def _check_team(team_size: Optional[int], team_members: Optional[List[TeamMember]]) -> None:
    if team_size is None:
        return
    if not 1 <= team_size <= MAX_TEAM_SIZE:
        raise ValueError(f"Team size must be between 1 and {MAX_TEAM_SIZE}")
    members = team_members or []
    if len(members) != team_size - 1:
        raise ValueError(f"A team of {team_size} needs {team_size - 1} team member(s) besides you")


def _dedupe(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return None
    return list(dict.fromkeys(v.strip() for v in values if v and v.strip()))


class ProfileSetup(CamelModel):
    """First-time profile completion. Required fields depend on `role`."""

    role: Role
    name: str = Field(..., min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=2000)

    # Student
    registration_number: Optional[str] = None
    student_type: Optional[StudentType] = None
    cgpa: Optional[float] = Field(None, ge=0, le=10)
    team_size: Optional[int] = Field(None, ge=1, le=MAX_TEAM_SIZE)
    team_members: List[TeamMember] = []

    # Faculty
    emp_id: Optional[str] = None
    faculty_department: List[str] = []
    faculty_domains: List[str] = []
    ug_limit: int = Field(0, ge=0)
    pg_limit: int = Field(0, ge=0)
    masters_limit: int = Field(0, ge=0)

    @field_validator("registration_number")
    @classmethod
    def check_registration_number(cls, v: Optional[str]) -> Optional[str]:
        return _check_registration_number(v)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("faculty_department", "faculty_domains")
    @classmethod
    def unique_names(cls, v: List[str]) -> List[str]:
        return _dedupe(v)

    @model_validator(mode="after")
    def check_role_fields(self) -> "ProfileSetup":
        if self.role is Role.unset:
            raise ValueError("Select a role")
        if self.role is Role.student:
            if not (self.registration_number and self.bio and self.cgpa is not None and self.student_type):
                raise ValueError("Please fill all required fields for student profile.")
            if self.team_size is None:
                self.team_size = len(self.team_members) + 1
            _check_team(self.team_size, self.team_members)
        else:
            if not (self.emp_id and self.faculty_department and self.faculty_domains):
                raise ValueError("Please fill all required fields for faculty profile.")
        return self

    def profile_fields(self) -> Dict[str, Any]:
        """Attributes to store; the other role's group is cleared."""
        if self.role is Role.student:
            return {
                "role": Role.student.value,
                "name": self.name,
                "bio": self.bio,
                "registrationNumber": self.registration_number,
                "studentType": self.student_type.value,
                "cgpa": self.cgpa,
                "teamSize": self.team_size,
                "teamMembers": [m.model_dump(by_alias=True) for m in self.team_members],
                "empId": None,
                "facultyDepartment": [],
                "facultyDomains": [],
                "ugLimit": 0,
                "pgLimit": 0,
                "mastersLimit": 0,
            }
        return {
            "role": Role.faculty.value,
            "name": self.name,
            "bio": self.bio,
            "empId": self.emp_id,
            "facultyDepartment": self.faculty_department,
            "facultyDomains": self.faculty_domains,
            "ugLimit": self.ug_limit,
            "pgLimit": self.pg_limit,
            "mastersLimit": self.masters_limit,
            "registrationNumber": None,
            "studentType": None,
            "cgpa": None,
            "teamSize": None,
            "teamMembers": [],
        }


class StudentProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=2000)
    registration_number: Optional[str] = None
    student_type: Optional[StudentType] = None
    cgpa: Optional[float] = Field(None, ge=0, le=10)
    team_size: Optional[int] = Field(None, ge=1, le=MAX_TEAM_SIZE)
    team_members: Optional[List[TeamMember]] = None

    @field_validator("registration_number")
    @classmethod
    def check_registration_number(cls, v: Optional[str]) -> Optional[str]:
        return _check_registration_number(v)

    @model_validator(mode="after")
    def check_team(self) -> "StudentProfileUpdate":
        if self.team_size is not None or self.team_members is not None:
            if self.team_size is None:
                self.team_size = len(self.team_members) + 1
            # teamSize and teamMembers are always written together
            self.team_members = self.team_members or []
            _check_team(self.team_size, self.team_members)
        return self


class FacultyProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=2000)
    emp_id: Optional[str] = Field(None, min_length=1)
    faculty_department: Optional[List[str]] = None
    faculty_domains: Optional[List[str]] = None
    ug_limit: Optional[int] = Field(None, ge=0)
    pg_limit: Optional[int] = Field(None, ge=0)
    masters_limit: Optional[int] = Field(None, ge=0)

    @field_validator("faculty_department", "faculty_domains")
    @classmethod
    def unique_names(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        v = _dedupe(v)
        if v is not None and not v:
            raise ValueError("Select at least one")
        return v


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(CamelModel):
    faculty_id: str = Field(..., min_length=1)
    reason: Optional[str] = Field(None, max_length=MAX_REASON_LENGTH)


class ApplicationResponse(CamelModel):
    id: str
    student_id: str
    faculty_id: str
    student_name: str
    faculty_name: str
    student_type: Optional[StudentType] = None
    status: ApplicationStatus
    reason: Optional[str] = None
    applied_at: datetime
    decided_at: Optional[datetime] = None


class SlotSummary(CamelModel):
    max_applications: int
    used: int
    remaining: int
    is_accepted: bool


class FacultyCard(CamelModel):
    id: str
    name: str
    bio: Optional[str] = None
    faculty_department: List[str] = []
    faculty_domains: List[str] = []
    applied: bool


class FacultyListResponse(CamelModel):
    faculty: List[FacultyCard]
    domains: List[str]
    slots: SlotSummary


class StudentDetails(CamelModel):
    name: str
    registration_number: Optional[str] = None
    student_type: Optional[StudentType] = None
    cgpa: Optional[float] = None
    bio: Optional[str] = None
    team_members: List[TeamMember] = []


class FacultyApplicationView(CamelModel):
    application: ApplicationResponse
    student: StudentDetails


class FacultyDashboardResponse(CamelModel):
    pending: List[FacultyApplicationView]
    accepted: List[FacultyApplicationView]
    rejected: List[FacultyApplicationView]
    counts: Dict[str, int]


class CategoryIntake(CamelModel):
    accepted: int
    limit: int
    unlimited: bool
    remaining: Optional[int] = None


class IntakeResponse(CamelModel):
    categories: Dict[StudentType, CategoryIntake]


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
