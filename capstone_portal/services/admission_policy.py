"""
Admission Policy Engine

PURPOSE:
Decide whether an apply / withdraw / accept / reject request is allowed,
and compute the aggregates the dashboards display.

RULES:
1. A student holds at most MAX_APPLICATIONS application records at once
2. One application per (student, faculty) pair
3. A student accepted by one faculty cannot apply or withdraw any more
4. Faculty accept per category (ug / pg / masters) up to their intake limit
5. pending -> Accepted | Rejected, once; only pending/Rejected may be withdrawn

Intake limit 0 means the category has no cap.

Everything here is a pure function of a snapshot of store records.
Callers read the snapshot, ask for a decision, and only write when allowed.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

from capstone_portal.schemas.schemas import (
    Application, ApplicationStatus, Decision, StudentType, UserProfile
)


MAX_APPLICATIONS = 5


class DenialReason(str, Enum):
    not_a_student = "not_a_student"
    not_a_faculty = "not_a_faculty"
    accepted_elsewhere = "accepted_elsewhere"
    already_applied = "already_applied"
    slot_cap_reached = "slot_cap_reached"
    category_full = "category_full"
    limit_reached = "limit_reached"
    application_accepted = "application_accepted"
    not_pending = "not_pending"
    not_owner = "not_owner"
    not_found = "not_found"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    DenialReason.not_a_student: "Only students can do this.",
    DenialReason.not_a_faculty: "Applications can only be sent to faculty members.",
    DenialReason.accepted_elsewhere: "Student has already been accepted by a faculty member.",
    DenialReason.already_applied: "You have already applied to this faculty.",
    DenialReason.slot_cap_reached: f"Slot cap reached: you can hold at most {MAX_APPLICATIONS} applications.",
    DenialReason.category_full: "This faculty member has no places left for your category.",
    DenialReason.limit_reached: "Intake limit reached for this student category.",
    DenialReason.application_accepted: "An accepted placement cannot be withdrawn.",
    DenialReason.not_pending: "This application has already been decided.",
    DenialReason.not_owner: "This application does not belong to you.",
    DenialReason.not_found: "Application not found.",
}


@dataclass(frozen=True)
class PolicyDecision:
    allowed: bool
    reason: Optional[DenialReason] = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = PolicyDecision(True)


def deny(reason: DenialReason) -> PolicyDecision:
    return PolicyDecision(False, reason)


# ============================================================
# DERIVED AGGREGATES
# ============================================================

def accepted_counts_by_faculty(
    applications: Iterable[Application],
) -> Dict[str, Dict[StudentType, int]]:
    """facultyId -> studentType -> number of Accepted applications."""
    counts: Dict[str, Dict[StudentType, int]] = defaultdict(lambda: defaultdict(int))
    for app in applications:
        if app.status is ApplicationStatus.accepted and app.student_type is not None:
            counts[app.faculty_id][app.student_type] += 1
    return {fid: dict(by_type) for fid, by_type in counts.items()}


def accepted_counts_for_faculty(
    applications: Iterable[Application], faculty_id: str
) -> Dict[StudentType, int]:
    counts = accepted_counts_by_faculty(a for a in applications if a.faculty_id == faculty_id)
    return counts.get(faculty_id, {})


def applied_set_for_student(applications: Iterable[Application], student_id: str) -> Set[str]:
    """Faculty ids the student currently holds an application record with."""
    return {app.faculty_id for app in applications if app.student_id == student_id}


def remaining_slots(applications: Iterable[Application], student_id: str) -> int:
    used = len(applied_set_for_student(applications, student_id))
    return max(MAX_APPLICATIONS - used, 0)


def bucket_by_status(applications: Iterable[Application]) -> Dict[ApplicationStatus, List[Application]]:
    buckets: Dict[ApplicationStatus, List[Application]] = {s: [] for s in ApplicationStatus}
    for app in applications:
        buckets[app.status].append(app)
    return buckets


def limit_allows(limit: int, accepted: int) -> bool:
    """True when one more acceptance fits under `limit` (0 = unlimited)."""
    return limit <= 0 or accepted + 1 <= limit


# ============================================================
# DECISIONS
# ============================================================

def can_apply(
    student: UserProfile,
    faculty: UserProfile,
    existing_applications: Iterable[Application],
) -> PolicyDecision:
    """
    Check a student's request to apply to a faculty member.

    `existing_applications` must contain at least every application of the
    student and every Accepted application of the faculty member.
    """
    if not student.is_student:
        return deny(DenialReason.not_a_student)
    if not faculty.is_faculty:
        return deny(DenialReason.not_a_faculty)
    if student.is_accepted:
        return deny(DenialReason.accepted_elsewhere)

    apps = list(existing_applications)
    applied = applied_set_for_student(apps, student.id)
    if faculty.id in applied:
        return deny(DenialReason.already_applied)
    if len(applied) >= MAX_APPLICATIONS:
        return deny(DenialReason.slot_cap_reached)

    limit = faculty.limit_for(student.student_type)
    accepted = accepted_counts_for_faculty(apps, faculty.id).get(student.student_type, 0)
    if limit > 0 and accepted >= limit:
        return deny(DenialReason.category_full)

    return ALLOW


def build_application(
    student: UserProfile,
    faculty: UserProfile,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Application:
    """New pending record. `studentType` is frozen at apply time."""
    return Application(
        id=Application.key(student.id, faculty.id),
        student_id=student.id,
        faculty_id=faculty.id,
        student_type=student.student_type,
        status=ApplicationStatus.pending,
        reason=reason,
        student_name=student.name or "Student",
        faculty_name=faculty.name or "Faculty",
        applied_at=now or datetime.utcnow(),
    )


def can_withdraw(application: Optional[Application], student: UserProfile) -> PolicyDecision:
    if application is None:
        return deny(DenialReason.not_found)
    if application.student_id != student.id:
        return deny(DenialReason.not_owner)
    if application.status is ApplicationStatus.accepted or student.is_accepted:
        return deny(DenialReason.application_accepted)
    return ALLOW


def decide_application(
    application: Optional[Application],
    decision: Decision,
    faculty: UserProfile,
    accepted_counts: Dict[StudentType, int],
    student: Optional[UserProfile] = None,
) -> PolicyDecision:
    """
    Check a faculty member's accept/reject of an application.

    `accepted_counts` is the faculty's current Accepted count per category.
    `student` is optional; when given, an already-placed student cannot be
    accepted again.
    """
    if application is None:
        return deny(DenialReason.not_found)
    if not faculty.is_faculty:
        return deny(DenialReason.not_a_faculty)
    if application.faculty_id != faculty.id:
        return deny(DenialReason.not_owner)
    if application.status.is_terminal:
        return deny(DenialReason.not_pending)

    if decision is Decision.reject:
        return ALLOW

    if student is not None and student.is_accepted:
        return deny(DenialReason.accepted_elsewhere)

    limit = faculty.limit_for(application.student_type)
    if not limit_allows(limit, accepted_counts.get(application.student_type, 0)):
        return deny(DenialReason.limit_reached)
    return ALLOW
