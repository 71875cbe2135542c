"""
MongoDB Service - CRUD operations for portal collections.

Collections in this database:
1. users               - Student and faculty profiles (_id = identity-provider id)
2. facultyApplications - Applications (_id = "{studentId}_{facultyId}")
3. departments         - Reference list for faculty profiles
4. domains             - Reference list for faculty profiles

Every write that has an admission precondition is a conditional write
(filter includes the expected state), so a stale read never turns into a
lost update.
"""

import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pymongo import ReturnDocument
from pymongo.client_session import ClientSession
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from capstone_portal.core.errors import AdmissionDenied
from capstone_portal.core.logger import get_logger
from capstone_portal.db.mongodb import COLLECTIONS, get_collection, get_mongo_client
from capstone_portal.schemas.schemas import (
    Application, ApplicationStatus, IdentitySession, Role, UserProfile
)
from capstone_portal.services.admission_policy import MAX_APPLICATIONS, DenialReason

logger = get_logger("mongo_service")

# Earlier revisions stored "Pending" and "accepted"
PENDING_VALUES = [ApplicationStatus.pending.value, "Pending"]
ACCEPTED_VALUES = [ApplicationStatus.accepted.value, "accepted"]


# ============================================================
# USERS COLLECTION
# ============================================================

class UserService:
    """
    Profile storage.
    Documents are created (role unset) on first login and completed by profile setup.
    """

    def __init__(self, collection: Optional[Collection] = None):
        self.collection: Collection = (
            collection if collection is not None else get_collection(COLLECTIONS["users"])
        )

    def get(self, user_id: str) -> Optional[UserProfile]:
        return UserProfile.from_document(self.collection.find_one({"_id": user_id}))

    def get_many(self, user_ids: Iterable[str]) -> Dict[str, UserProfile]:
        """Fetch profiles by id. Missing ids are simply absent from the result."""
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return {}
        cursor = self.collection.find({"_id": {"$in": ids}})
        profiles = (UserProfile.from_document(doc) for doc in cursor)
        return {p.id: p for p in profiles}

    def ensure_user(self, session: IdentitySession) -> UserProfile:
        """Create the role-unset record on first login. Idempotent."""
        doc = self.collection.find_one_and_update(
            {"_id": session.id},
            {
                "$setOnInsert": {
                    "email": session.email,
                    "role": Role.unset.value,
                    "name": session.display_name,
                    "isAccepted": False,
                    "createdAt": datetime.utcnow(),
                }
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return UserProfile.from_document(doc)

    def update_fields(self, user_id: str, fields: dict) -> Optional[UserProfile]:
        """Set profile fields and return the updated profile."""
        doc = self.collection.find_one_and_update(
            {"_id": user_id},
            {"$set": {**fields, "updatedAt": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return UserProfile.from_document(doc)

    def list_faculty(self, search: Optional[str] = None, domain: Optional[str] = None) -> List[UserProfile]:
        """
        Faculty profiles, optionally filtered.

        Args:
            search: case-insensitive substring of the faculty name
            domain: exact domain name the faculty must list
        """
        query: dict = {"role": Role.faculty.value}
        if domain:
            query["facultyDomains"] = domain
        if search:
            query["name"] = {"$regex": re.escape(search), "$options": "i"}
        cursor = self.collection.find(query).sort("name", 1)
        return [UserProfile.from_document(doc) for doc in cursor]


# ============================================================
# FACULTY APPLICATIONS COLLECTION
# ============================================================

class ApplicationService:
    """
    Application storage, including the transactional accept cascade.
    """

    def __init__(
        self,
        collection: Optional[Collection] = None,
        users: Optional[Collection] = None,
        client=None,
    ):
        self.collection: Collection = (
            collection if collection is not None else get_collection(COLLECTIONS["applications"])
        )
        self.users: Collection = users if users is not None else get_collection(COLLECTIONS["users"])
        self.client = client if client is not None else get_mongo_client()

    def _many(self, query: dict) -> List[Application]:
        cursor = self.collection.find(query).sort("appliedAt", -1)
        return [Application.from_document(doc) for doc in cursor]

    def get(self, application_id: str) -> Optional[Application]:
        return Application.from_document(self.collection.find_one({"_id": application_id}))

    def by_faculty(self, faculty_id: str) -> List[Application]:
        return self._many({"facultyId": faculty_id})

    def by_student(self, student_id: str) -> List[Application]:
        return self._many({"studentId": student_id})

    def by_status(self, status: ApplicationStatus) -> List[Application]:
        if status is ApplicationStatus.pending:
            return self._many({"status": {"$in": PENDING_VALUES}})
        if status is ApplicationStatus.accepted:
            return self._many({"status": {"$in": ACCEPTED_VALUES}})
        return self._many({"status": status.value})

    def accepted_for_faculty(self, faculty_id: str) -> List[Application]:
        return self._many({"facultyId": faculty_id, "status": {"$in": ACCEPTED_VALUES}})

    def insert(self, application: Application) -> Application:
        """
        Insert a new application as one transaction.

        Steps (all or nothing):
        1. Bump the student's applicationVersion, only if not accepted.
           Conflicts with an accept cascade and with other applies of the student.
        2. Re-count the student's applications against MAX_APPLICATIONS
        3. Insert; the composite _id makes a second application for the same pair fail

        Raises:
            AdmissionDenied: a precondition no longer holds; nothing is written
        """

        def _insert(session: ClientSession) -> None:
            student_result = self.users.update_one(
                {"_id": application.student_id, "isAccepted": {"$ne": True}},
                {"$inc": {"applicationVersion": 1}},
                session=session,
            )
            if student_result.matched_count == 0:
                raise AdmissionDenied(DenialReason.accepted_elsewhere)

            held = self.collection.count_documents({"studentId": application.student_id}, session=session)
            if held >= MAX_APPLICATIONS:
                raise AdmissionDenied(DenialReason.slot_cap_reached)

            try:
                self.collection.insert_one(application.to_document(), session=session)
            except DuplicateKeyError:
                raise AdmissionDenied(DenialReason.already_applied)

        with self.client.start_session() as session:
            session.with_transaction(_insert)
        return application

    def withdraw(self, application_id: str, student_id: str) -> bool:
        """Delete the student's application unless it was accepted meanwhile."""
        result = self.collection.delete_one({
            "_id": application_id,
            "studentId": student_id,
            "status": {"$nin": ACCEPTED_VALUES},
        })
        return result.deleted_count > 0

    def reject(self, application_id: str, faculty_id: str) -> bool:
        """pending -> Rejected. Returns False when the application is no longer pending."""
        result = self.collection.update_one(
            {"_id": application_id, "facultyId": faculty_id, "status": {"$in": PENDING_VALUES}},
            {"$set": {"status": ApplicationStatus.rejected.value, "decidedAt": datetime.utcnow()}},
        )
        return result.modified_count > 0

    def accept_cascade(self, application: Application, faculty: UserProfile) -> None:
        """
        Accept `application` as one transaction.

        Steps (all or nothing):
        1. Flag the student accepted, only if not accepted already
        2. pending -> Accepted on the application
        3. Re-count the faculty's accepted students in this category
        4. Bump the faculty's admissionVersion so concurrent accepts conflict
        5. Delete every other application of the student

        Raises:
            AdmissionDenied: a precondition no longer holds; nothing is written
        """
        decided_at = datetime.utcnow()

        def _cascade(session: ClientSession) -> None:
            student_result = self.users.update_one(
                {"_id": application.student_id, "isAccepted": {"$ne": True}},
                {"$set": {"isAccepted": True, "acceptedFacultyId": faculty.id}},
                session=session,
            )
            if student_result.matched_count == 0:
                raise AdmissionDenied(DenialReason.accepted_elsewhere)

            app_result = self.collection.update_one(
                {"_id": application.id, "facultyId": faculty.id, "status": {"$in": PENDING_VALUES}},
                {"$set": {"status": ApplicationStatus.accepted.value, "decidedAt": decided_at}},
                session=session,
            )
            if app_result.matched_count == 0:
                raise AdmissionDenied(DenialReason.not_pending)

            limit = faculty.limit_for(application.student_type)
            if limit > 0:
                accepted = self.collection.count_documents(
                    {
                        "facultyId": faculty.id,
                        "status": {"$in": ACCEPTED_VALUES},
                        "studentType": application.student_type.value,
                    },
                    session=session,
                )
                if accepted > limit:
                    raise AdmissionDenied(DenialReason.limit_reached)

            self.users.update_one(
                {"_id": faculty.id},
                {"$inc": {"admissionVersion": 1}},
                session=session,
            )

            removed = self.collection.delete_many(
                {"studentId": application.student_id, "_id": {"$ne": application.id}},
                session=session,
            )
            logger.info(
                "Accept cascade applied",
                application_id=application.id,
                student_id=application.student_id,
                faculty_id=faculty.id,
                removed_applications=removed.deleted_count,
            )

        with self.client.start_session() as session:
            session.with_transaction(_cascade)


# ============================================================
# REFERENCE LISTS (departments, domains)
# ============================================================

class ReferenceListService:
    """Read-only lists offered while setting up a faculty profile."""

    def __init__(self, departments: Optional[Collection] = None, domains: Optional[Collection] = None):
        self.departments_collection: Collection = (
            departments if departments is not None else get_collection(COLLECTIONS["departments"])
        )
        self.domains_collection: Collection = (
            domains if domains is not None else get_collection(COLLECTIONS["domains"])
        )

    @staticmethod
    def _names(collection: Collection) -> List[str]:
        return sorted(doc["name"] for doc in collection.find({}, {"name": 1}) if doc.get("name"))

    def departments(self) -> List[str]:
        return self._names(self.departments_collection)

    def domains(self) -> List[str]:
        return self._names(self.domains_collection)
