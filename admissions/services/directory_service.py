"""
Directory Service - public, display-ready college listing.

Pure projection over college_admins + the linked colleges record.
Nothing is cached; every call recomputes the listing.
"""

from typing import List, Optional, Tuple, Any

from admissions.db.mongodb import get_collection, COLLECTIONS
from admissions.services.mongo_service import serialize_docs, PASSWORD_FIELD

UNNAMED_COLLEGE = "Unnamed College"
DEFAULT_COURSE = "Various Programs"
ADDRESS_PARTS = ["line1", "city", "state", "pincode", "country"]


def normalize_address(raw: Any) -> Tuple[str, str, str]:
    """
    Flatten a stored address into (address, city, state).

    - string: split on commas; first segment is the city, second the state,
      a single segment is used for both
    - object: "line1, city, state, pincode, country" without empty parts
    """
    if not raw:
        return "", "", ""

    if isinstance(raw, str):
        parts = [p.strip() for p in raw.split(",") if p.strip()]
        city = parts[0] if parts else ""
        state = parts[1] if len(parts) > 1 else city
        return raw, city, state

    if isinstance(raw, dict):
        address = ", ".join(str(raw[k]) for k in ADDRESS_PARTS if raw.get(k))
        return address, raw.get("city") or "", raw.get("state") or ""

    return "", "", ""


def _media_url(media: Any) -> Optional[str]:
    if isinstance(media, dict):
        return media.get("url") or None
    return None


def _first(*values: Any, default: Any = "") -> Any:
    for value in values:
        if value:
            return value
    return default


def directory_entry(profile: dict, college: Optional[dict]) -> dict:
    """One flattened listing row for a profile and its (optional) College."""
    college = college or {}
    content = profile.get("profile") or {}
    contact = content.get("contact") or {}

    address, city, state = normalize_address(content.get("address") or college.get("address"))
    course_names = [c.get("name") for c in profile.get("courses") or [] if c.get("name")]

    return {
        "id": str(profile["_id"]),
        "college_id": str(college["_id"]) if college.get("_id") else None,
        "name": _first(profile.get("name"), college.get("name"), default=UNNAMED_COLLEGE),
        "email": _first(profile.get("email"), contact.get("email"), college.get("email")),
        "address": address,
        "city": city,
        "state": state,
        "contact_number": _first(
            profile.get("contact_number"),
            contact.get("primary_phone"),
            college.get("contact_number")
        ),
        "logo": _media_url(profile.get("logo")) or college.get("logo") or None,
        "cover_photo": _media_url(profile.get("cover_photo")) or college.get("cover_photo") or None,
        "course": course_names[0] if course_names else DEFAULT_COURSE,
        "courses": course_names,
        "created_at": profile.get("created_at"),
    }


class DirectoryService:

    def __init__(self):
        self.profiles = get_collection(COLLECTIONS["college_admins"])
        self.colleges = get_collection(COLLECTIONS["colleges"])

    def list_directory(self) -> List[dict]:
        """Every profile as a flattened listing row, newest first."""
        profiles = list(self.profiles.find().sort("created_at", -1))
        linked_ids = [p["college"] for p in profiles if p.get("college")]
        colleges = {
            c["_id"]: c
            for c in self.colleges.find({"_id": {"$in": linked_ids}}, {PASSWORD_FIELD: 0})
        }
        return [directory_entry(p, colleges.get(p.get("college"))) for p in profiles]

    def list_registered_colleges(self) -> List[dict]:
        """Raw College registrations, password hashes stripped."""
        return serialize_docs(list(self.colleges.find({}, {PASSWORD_FIELD: 0})))


def get_directory_service() -> DirectoryService:
    """Get directory service instance."""
    return DirectoryService()
