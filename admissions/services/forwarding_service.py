"""
Finalization & Forwarding Service

Admin-brokered introductions between a student and a college.

State per student:
    prospecting  - college_finalized / course_finalized not both set
    finalized    - both set
    forwarded    - finalized, and the shortlist for the finalized college
                   (matched by profile id or name) is flagged is_admin_forwarded

finalize() writes the student fields, forward() flags an existing shortlist.
Forwarding never creates a shortlist; the college only sees forwarded
students through list_forwarded_to_college().
"""

import logging
from typing import List, Optional, Any
from fastapi import HTTPException
from pymongo import ReturnDocument

from admissions.schemas.schemas import AdmissionState, FinalizeField
from admissions.services.mongo_service import StudentService, serialize_doc, to_object_id
from admissions.services.shortlist_service import ShortlistService, course_entries

logger = logging.getLogger(__name__)

FINALIZE_FIELDS = {
    FinalizeField.college: "college_finalized",
    FinalizeField.course: "course_finalized",
}

FORWARDED_COURSE_PARENT = "Admin Forwarded"
STUDENT_CONTACT_FIELDS = ["first_name", "last_name", "email", "phone", "date_of_birth", "education"]


def _filled(value: Any) -> bool:
    return bool(str(value or "").strip())


def is_finalized(student: dict) -> bool:
    return _filled(student.get("college_finalized")) and _filled(student.get("course_finalized"))


def matches_finalized_college(shortlist: dict, finalized: str) -> bool:
    """
    The shortlist points at the finalized college, named either by profile id
    or by profile name (case-insensitive). `college` may be a raw id or a
    populated {_id, name} summary.
    """
    wanted = str(finalized or "").strip().lower()
    college = shortlist.get("college")
    if isinstance(college, dict):
        candidates = [college.get("_id"), college.get("name")]
    else:
        candidates = [college]
    return any(str(c).strip().lower() == wanted for c in candidates if c)


def workflow_state(student: dict, shortlists: List[dict]) -> AdmissionState:
    """
    Observable admission state of a student given their shortlists.
    Only a forwarded shortlist for the finalized college counts as forwarded.
    """
    if not is_finalized(student):
        return AdmissionState.prospecting
    finalized = student.get("college_finalized")
    if any(s.get("is_admin_forwarded") and matches_finalized_college(s, finalized) for s in shortlists):
        return AdmissionState.forwarded
    return AdmissionState.finalized


class ForwardingService:

    def __init__(self):
        self.students = StudentService()
        self.shortlists = ShortlistService()

    def finalize(self, student_id: Any, field: FinalizeField, value: str) -> dict:
        """
        Set college_finalized or course_finalized.
        The value is not checked against the student's shortlists.
        """
        try:
            field = FinalizeField(field)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid field. Must be 'college' or 'course'")

        student = self.students.set_field(student_id, FINALIZE_FIELDS[field], value)
        if not student:
            raise HTTPException(status_code=404, detail="Student not found")

        logger.info("Student %s %s finalized as %r", student_id, field.value, value)
        return serialize_doc(student)

    def forward(
        self,
        student_id: Any,
        college_admin_id: Any,
        courses: Optional[List[str]] = None,
        notes: Optional[str] = None
    ) -> dict:
        """
        Flag the student's shortlist with the college as forwarded.

        Raises:
            404 unknown student
            400 college/course not finalized
            404 no shortlist for the pair
        """
        student = self.students.get_or_404(to_object_id(student_id, "studentId"))
        if not is_finalized(student):
            raise HTTPException(
                status_code=400,
                detail="Finalize the student's college and course before forwarding"
            )

        updates = {
            "is_admin_forwarded": True,
            "notes": f"Admin forwarded: {notes or 'No additional notes'}"
        }
        if courses:
            updates["interested_courses"] = course_entries(
                {"parent": FORWARDED_COURSE_PARENT, "name": name} for name in courses
            )

        shortlist = self.shortlists.collection.find_one_and_update(
            {
                "student": student["_id"],
                "college": to_object_id(college_admin_id, "collegeId")
            },
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        if not shortlist:
            raise HTTPException(status_code=404, detail="No shortlist exists for this student and college")

        logger.info("Student %s forwarded to college %s", student["_id"], college_admin_id)
        return {
            "student": serialize_doc(student),
            "college": str(shortlist["college"]),
            "courses": courses or [],
            "notes": notes,
            "shortlist": serialize_doc(shortlist)
        }

    def list_forwarded_to_college(self, college_admin_id: Any) -> List[dict]:
        """Forwarded students for one college with full contact details, newest first."""
        college_oid = to_object_id(college_admin_id, "collegeAdminId")
        items = list(
            self.shortlists.collection
            .find({"college": college_oid, "is_admin_forwarded": True})
            .sort("created_at", -1)
        )
        populated = self.shortlists.populate(
            items,
            student_fields=STUDENT_CONTACT_FIELDS,
            college_fields=["name", "email"]
        )

        rows = []
        for item in populated:
            student = item["student"] or {}
            rows.append({
                "id": student.get("_id"),
                "name": f"{student.get('first_name', '')} {student.get('last_name', '')}".strip(),
                "email": student.get("email"),
                "phone": student.get("phone"),
                "date_of_birth": student.get("date_of_birth"),
                "education": student.get("education"),
                "interested_courses": item.get("interested_courses") or [],
                "notes": item.get("notes"),
                "forwarded_at": item.get("created_at"),
                "college": item["college"]
            })
        return rows

    def student_info(self, student_id: Any) -> dict:
        """Complete student record for admins, including finalization fields."""
        student = self.students.get_or_404(student_id)
        if student.get("role", "student") != "student":
            raise HTTPException(status_code=400, detail="Requested user is not a student")

        docs = list(self.shortlists.collection.find({"student": student["_id"]}))
        shortlists = self.shortlists.populate(docs, college_fields=["name"])
        return {
            "id": str(student["_id"]),
            "first_name": student.get("first_name"),
            "last_name": student.get("last_name"),
            "full_name": f"{student.get('first_name', '')} {student.get('last_name', '')}".strip(),
            "email": student.get("email"),
            "phone": student.get("phone"),
            "date_of_birth": student.get("date_of_birth"),
            "education": student.get("education"),
            "role": student.get("role", "student"),
            "created_at": student.get("created_at"),
            "college_finalized": student.get("college_finalized", ""),
            "course_finalized": student.get("course_finalized", ""),
            "counselor": student.get("counselor"),
            "state": workflow_state(student, shortlists).value
        }

    def student_details(self, student_id: Any) -> dict:
        """Student record plus one course_selections entry per shortlist."""
        student = self.students.get_or_404(student_id)
        docs = list(self.shortlists.collection.find({"student": student["_id"]}))
        populated = self.shortlists.populate(docs, college_fields=["name"])

        details = serialize_doc(student)
        details["course_selections"] = [
            {
                "college": {
                    "_id": s["college"]["_id"] if s["college"] else None,
                    "name": (s["college"] or {}).get("name") or "Unknown College"
                },
                "courses": [f"{c.get('parent')} - {c.get('name')}" for c in s.get("interested_courses") or []],
                "application_status": "Forwarded" if s.get("is_admin_forwarded") else "Applied",
                "notes": s.get("notes"),
                "added_at": s.get("created_at")
            }
            for s in populated
        ]
        return details


def get_forwarding_service() -> ForwardingService:
    """Get forwarding service instance."""
    return ForwardingService()
