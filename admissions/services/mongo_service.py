"""
MongoDB Service - account collections and shared document helpers.

Collections handled here:
1. students  - student login accounts + finalization fields set by admins
2. colleges  - raw institutional registrations (login accounts)
3. admins    - platform administrator accounts

Profile, shortlist and directory logic live in their own service modules
and reuse the helpers below.
"""

import logging
from datetime import datetime
from typing import Optional, List, Any
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from admissions.db.mongodb import get_collection, COLLECTIONS

logger = logging.getLogger(__name__)

# Never returned to clients
PASSWORD_FIELD = "password_hash"


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def _serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return serialize_doc(value)
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


def serialize_doc(doc: dict) -> dict:
    """Convert MongoDB document (and nested documents) to JSON-serializable dict."""
    if doc is None:
        return None
    return {
        key: _serialize_value(value)
        for key, value in doc.items()
        if key != PASSWORD_FIELD
    }


def serialize_docs(docs: list) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


def to_object_id(value: Any, field: str = "id") -> ObjectId:
    """Parse a client-supplied id, 400 on anything that is not an ObjectId."""
    if isinstance(value, ObjectId):
        return value
    if not value:
        raise HTTPException(status_code=400, detail=f"{field} required")
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail=f"Invalid {field}")


def project(doc: Optional[dict], fields: List[str]) -> Optional[dict]:
    """Keep _id plus the listed fields (the populate() select list)."""
    if doc is None:
        return None
    out = {"_id": doc["_id"]}
    for field in fields:
        if field in doc:
            out[field] = doc[field]
    return out


# ============================================================
# ACCOUNT COLLECTIONS
# ============================================================

class AccountService:
    """
    Shared storage for login accounts.
    Subclasses bind the collection and what a new document looks like.
    """

    collection_key: str = None
    label: str = "Account"

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS[self.collection_key])

    def _insert(self, doc: dict) -> str:
        doc["email"] = doc["email"].strip().lower()
        doc.setdefault("created_at", datetime.utcnow())
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise HTTPException(status_code=400, detail=f"{self.label} already exists")
        logger.info("%s registered: %s", self.label, doc["email"])
        return str(result.inserted_id)

    def get_by_email(self, email: str) -> Optional[dict]:
        """Raw document, password hash included (for login)."""
        return self.collection.find_one({"email": email.strip().lower()})

    def get_by_id(self, account_id: Any) -> Optional[dict]:
        """Raw document by id, None when missing."""
        return self.collection.find_one({"_id": to_object_id(account_id)})

    def get_or_404(self, account_id: Any) -> dict:
        doc = self.get_by_id(account_id)
        if not doc:
            raise HTTPException(status_code=404, detail=f"{self.label} not found")
        return doc

    def list_all(self) -> List[dict]:
        docs = self.collection.find({}, {PASSWORD_FIELD: 0}).sort("created_at", -1)
        return serialize_docs(list(docs))


class StudentService(AccountService):
    collection_key = "students"
    label = "Student"

    def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        phone: str,
        date_of_birth: datetime,
        education: str,
        password_hash: str
    ) -> str:
        """Create a student account. Finalization fields start empty."""
        return self._insert({
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "phone": phone,
            "date_of_birth": date_of_birth,
            "education": education,
            PASSWORD_FIELD: password_hash,
            "role": "student",
            "college_finalized": "",
            "course_finalized": "",
        })

    def set_field(self, student_id: Any, field: str, value: Any) -> Optional[dict]:
        """Set one field and return the updated document (None if no student)."""
        return self.collection.find_one_and_update(
            {"_id": to_object_id(student_id, "student_id")},
            {"$set": {field: value}},
            projection={PASSWORD_FIELD: 0},
            return_document=ReturnDocument.AFTER
        )


class CollegeService(AccountService):
    collection_key = "colleges"
    label = "College"

    def register(
        self,
        institute_code: str,
        name: str,
        email: str,
        password_hash: str,
        contact_number: str = None
    ) -> str:
        return self._insert({
            "institute_code": institute_code,
            "name": name,
            "email": email,
            PASSWORD_FIELD: password_hash,
            "contact_number": contact_number,
        })


class AdminService(AccountService):
    collection_key = "admins"
    label = "Admin"

    def register(self, name: str, email: str, password_hash: str) -> str:
        return self._insert({
            "name": name,
            "email": email,
            PASSWORD_FIELD: password_hash,
        })


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================

def get_account_service(role: str) -> AccountService:
    """Account service for a UserRole value."""
    services = {
        "student": StudentService,
        "college": CollegeService,
        "admin": AdminService,
    }
    return services[role]()
