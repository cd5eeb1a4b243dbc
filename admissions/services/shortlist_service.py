"""
Shortlist Service - student interest in colleges and their courses.

Collection: shortlists
{
    "student": ObjectId,            # students._id
    "college": ObjectId,            # college_admins._id (the profile, not the raw College)
    "notes": str,
    "interested_courses": [{"parent": str, "name": str, "added_at": datetime}],
    "is_admin_forwarded": bool,
    "created_at": datetime
}

There is exactly one document per (student, college) pair. The compound
unique index enforces it; writes never check-then-insert, they insert or
upsert and treat DuplicateKeyError as "already shortlisted".
"""

import logging
from datetime import datetime
from typing import Optional, List, Any, Iterable
from bson import ObjectId
from fastapi import HTTPException
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from admissions.db.mongodb import get_collection, COLLECTIONS
from admissions.services.mongo_service import serialize_doc, to_object_id, project

logger = logging.getLogger(__name__)

# populate() select lists
STUDENT_SUMMARY_FIELDS = ["first_name", "last_name", "email"]
STUDENT_LISTING_FIELDS = ["first_name", "last_name", "email", "education", "created_at"]
COLLEGE_NAME_FIELDS = ["name"]
COLLEGE_CARD_FIELDS = ["name", "profile", "logo"]
COLLEGE_DETAIL_FIELDS = ["name", "email", "profile", "logo", "cover_photo", "courses", "contact_number"]


def course_entries(courses: Optional[Iterable[Any]]) -> List[dict]:
    """Normalize submitted courses (models or dicts) into stored entries."""
    now = datetime.utcnow()
    entries = []
    for course in courses or []:
        if hasattr(course, "model_dump"):
            course = course.model_dump()
        entries.append({
            "parent": course.get("parent"),
            "name": course.get("name"),
            "added_at": now
        })
    return entries


class ShortlistService:
    """
    Create/toggle/remove interest links and compute the per-college views.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["shortlists"])
        self.students: Collection = get_collection(COLLECTIONS["students"])
        self.colleges: Collection = get_collection(COLLECTIONS["college_admins"])

    # --------------------------------------------------------
    # helpers
    # --------------------------------------------------------

    def _resolve_pair(self, student_id: Any, college_admin_id: Any):
        """Parse both ids and make sure both records exist."""
        student_oid = to_object_id(student_id, "student")
        college_oid = to_object_id(college_admin_id, "collegeId")
        if not self.colleges.count_documents({"_id": college_oid}, limit=1):
            raise HTTPException(status_code=404, detail="College not found")
        if not self.students.count_documents({"_id": student_oid}, limit=1):
            raise HTTPException(status_code=404, detail="Student not found")
        return student_oid, college_oid

    def _lookup(self, collection: Collection, ids: Iterable[ObjectId], fields: List[str]) -> dict:
        ids = list({oid for oid in ids if oid is not None})
        if not ids:
            return {}
        projection = {field: 1 for field in fields}
        return {doc["_id"]: doc for doc in collection.find({"_id": {"$in": ids}}, projection)}

    def populate(
        self,
        docs: List[dict],
        student_fields: Optional[List[str]] = None,
        college_fields: Optional[List[str]] = None
    ) -> List[dict]:
        """Replace student/college refs with summary documents (None when dangling)."""
        students = {}
        colleges = {}
        if student_fields:
            students = self._lookup(self.students, (d["student"] for d in docs), student_fields)
        if college_fields:
            colleges = self._lookup(self.colleges, (d["college"] for d in docs), college_fields)

        populated = []
        for doc in docs:
            doc = dict(doc)
            if student_fields:
                doc["student"] = project(students.get(doc["student"]), student_fields)
            if college_fields:
                doc["college"] = project(colleges.get(doc["college"]), college_fields)
            populated.append(serialize_doc(doc))
        return populated

    def populate_one(self, doc: Optional[dict]) -> Optional[dict]:
        if doc is None:
            return None
        return self.populate([doc], STUDENT_SUMMARY_FIELDS, COLLEGE_NAME_FIELDS)[0]

    # --------------------------------------------------------
    # mutations
    # --------------------------------------------------------

    def toggle_interest(
        self,
        student_id: Any,
        college_admin_id: Any,
        interested_courses: Optional[List[Any]] = None
    ) -> dict:
        """
        Flip the shortlist state of a (student, college) pair.

        Existing record -> deleted, shortlisted=False.
        No record -> created with the given courses, shortlisted=True.

        Returns:
            {"message", "shortlisted", "created", and when shortlisted
             "data" (populated record) + "aggregated_courses"}
        """
        student_oid, college_oid = self._resolve_pair(student_id, college_admin_id)
        pair = {"student": student_oid, "college": college_oid}

        if self.collection.delete_one(pair).deleted_count:
            logger.info("Shortlist removed by toggle: student=%s college=%s", student_oid, college_oid)
            return {"message": "Unshortlisted", "shortlisted": False, "created": False}

        doc = {
            **pair,
            "notes": None,
            "interested_courses": course_entries(interested_courses),
            "is_admin_forwarded": False,
            "created_at": datetime.utcnow()
        }
        try:
            self.collection.insert_one(doc)
            created, message = True, "Shortlisted"
            logger.info("Shortlist created by toggle: student=%s college=%s", student_oid, college_oid)
        except DuplicateKeyError:
            # a concurrent toggle inserted first; the pair is shortlisted either way
            logger.info("Shortlist already present: student=%s college=%s", student_oid, college_oid)
            doc = self.collection.find_one(pair)
            created, message = False, "Already shortlisted"

        return {
            "message": message,
            "shortlisted": True,
            "created": created,
            "data": self.populate_one(doc),
            "aggregated_courses": self.aggregate_course_interest(college_oid)
        }

    def add_or_update_interest(
        self,
        student_id: Any,
        college_admin_id: Any,
        notes: Optional[str] = None,
        interested_courses: Optional[List[Any]] = None
    ) -> dict:
        """
        Upsert a shortlist for the pair. Always leaves a record present.

        - notes are written only when the record is created ($setOnInsert)
        - interested_courses, when given, replace the stored list wholesale

        Returns:
            {"message", "created", "data", "aggregated_courses"}; created is
            False when an existing record was updated. On a
            duplicate-key race only {"message": "Already shortlisted", "created": False}
        """
        student_oid, college_oid = self._resolve_pair(student_id, college_admin_id)
        pair = {"student": student_oid, "college": college_oid}

        update = {
            "$setOnInsert": {
                "notes": notes,
                "is_admin_forwarded": False,
                "created_at": datetime.utcnow()
            }
        }
        if interested_courses is not None:
            update["$set"] = {"interested_courses": course_entries(interested_courses)}
        else:
            update["$setOnInsert"]["interested_courses"] = []

        try:
            result = self.collection.update_one(pair, update, upsert=True)
        except DuplicateKeyError:
            logger.info("Shortlist upsert raced: student=%s college=%s", student_oid, college_oid)
            return {"message": "Already shortlisted", "created": False}

        created = result.upserted_id is not None
        doc = self.collection.find_one(pair)
        logger.info("Shortlist %s: student=%s college=%s", "created" if created else "updated", student_oid, college_oid)
        return {
            "message": "Shortlisted" if created else "Shortlist updated",
            "created": created,
            "data": self.populate_one(doc),
            "aggregated_courses": self.aggregate_course_interest(college_oid)
        }

    def remove_interest(self, student_id: Any, college_admin_id: Any) -> None:
        """Delete the pair's record. 404 when there is none."""
        result = self.collection.delete_one({
            "student": to_object_id(student_id, "student"),
            "college": to_object_id(college_admin_id, "collegeId")
        })
        if not result.deleted_count:
            raise HTTPException(status_code=404, detail="Not found")
        logger.info("Shortlist removed: student=%s college=%s", student_id, college_admin_id)

    # --------------------------------------------------------
    # reads
    # --------------------------------------------------------

    def list_for_student(self, student_id: Any) -> List[dict]:
        """Student's shortlists with the college card (name, profile, logo)."""
        docs = list(self.collection.find({"student": to_object_id(student_id, "student")}))
        return self.populate(docs, college_fields=COLLEGE_CARD_FIELDS)

    def list_detailed_for_student(self, student_id: Any) -> List[dict]:
        """Student's shortlists with the wider college detail block."""
        docs = list(self.collection.find({"student": to_object_id(student_id, "student")}))
        return self.populate(docs, college_fields=COLLEGE_DETAIL_FIELDS)

    def list_for_college(self, college_admin_id: Any) -> dict:
        """
        Who is interested in this college, newest first.

        Returns:
            {"college": {_id, name, email} | None, "count": int, "students": [...],
             "aggregated_courses": [course names]}
            An unknown profile gives the empty dataset instead of an error.
        """
        empty = {"college": None, "count": 0, "students": [], "aggregated_courses": []}
        if not college_admin_id:
            return empty

        college_oid = to_object_id(college_admin_id, "collegeAdminId")
        college = self.colleges.find_one({"_id": college_oid}, {"name": 1, "email": 1})
        if not college:
            return empty

        items = list(self.collection.find({"college": college_oid}).sort("created_at", -1))
        students = self._lookup(self.students, (it["student"] for it in items), STUDENT_LISTING_FIELDS)

        rows = []
        for item in items:
            student = students.get(item["student"]) or {}
            rows.append({
                "id": str(item["student"]),
                "first_name": student.get("first_name"),
                "last_name": student.get("last_name"),
                "email": student.get("email"),
                "education": student.get("education"),
                "shortlisted_at": item.get("created_at"),
                "interested_courses": item.get("interested_courses") or []
            })

        return {
            "college": serialize_doc(college),
            "count": len(rows),
            "students": rows,
            "aggregated_courses": self.aggregate_course_interest(college_oid)
        }

    def aggregate_course_interest(self, college_admin_id: Any) -> List[str]:
        """
        Distinct interested course names across every shortlist for a college.
        Falsy names are dropped; order is not significant (sorted for stable output).
        """
        pipeline = [
            {"$match": {"college": to_object_id(college_admin_id, "collegeAdminId")}},
            {"$unwind": "$interested_courses"},
            {"$group": {"_id": "$college", "courses": {"$addToSet": "$interested_courses.name"}}}
        ]
        result = list(self.collection.aggregate(pipeline))
        if not result:
            return []
        return sorted({name for name in result[0].get("courses") or [] if name})

    def aggregate_course_interest_by_college(self) -> dict:
        """{profile id str: [course names]} for every college with shortlists."""
        pipeline = [
            {"$unwind": "$interested_courses"},
            {"$group": {"_id": "$college", "courses": {"$addToSet": "$interested_courses.name"}}}
        ]
        return {
            str(row["_id"]): sorted({name for name in row.get("courses") or [] if name})
            for row in self.collection.aggregate(pipeline)
        }

    def stats_across_colleges(self) -> List[dict]:
        """
        Demand ranking: shortlist count and latest shortlist per college,
        most shortlisted first, joined with the profile name/email.
        """
        pipeline = [
            {"$group": {"_id": "$college", "count": {"$sum": 1}, "latest": {"$max": "$created_at"}}},
            {"$sort": {"count": -1}}
        ]
        rows = list(self.collection.aggregate(pipeline))
        colleges = self._lookup(self.colleges, (row["_id"] for row in rows), ["name", "email"])

        data = []
        for row in rows:
            college = colleges.get(row["_id"]) or {}
            data.append({
                "college_admin_id": str(row["_id"]),
                "name": college.get("name") or "Unknown",
                "email": college.get("email"),
                "count": row["count"],
                "latest": row.get("latest")
            })
        return data


def get_shortlist_service() -> ShortlistService:
    """Get shortlist service instance."""
    return ShortlistService()
