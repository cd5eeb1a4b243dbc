"""
College Profile Service - the rich profile a college account maintains.

Collection: college_admins
- One profile per College account (unique index on `college`)
- Branding media, free-text profile block and the course catalog
- Never hard-deleted: delete is a stub
"""

import logging
from datetime import datetime
from typing import Optional, List, Any
from fastapi import HTTPException
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from admissions.db.mongodb import get_collection, COLLECTIONS
from admissions.schemas.schemas import CollegeProfileCreate, CollegeProfileUpdate, CollegeProfileContent
from admissions.services.mongo_service import serialize_doc, serialize_docs, to_object_id
from admissions.utils.file_upload import media_from_link

logger = logging.getLogger(__name__)


def _profile_block(content: CollegeProfileContent) -> dict:
    address = content.address
    if address is not None and not isinstance(address, str):
        address = address.model_dump()
    return {
        "description": content.description or "",
        "features": content.features or [],
        "address": address or {},
        "google_location": content.google_location or "",
        "contact": content.contact.model_dump(),
        "videos": content.videos or []
    }


class CollegeProfileService:
    """
    CRUD for CollegeAdminProfile documents.
    Mutations are keyed by the owning College id taken from the token.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["college_admins"])

    def create(
        self,
        college_id: str,
        data: CollegeProfileCreate,
        account_email: Optional[str] = None,
        logo: Optional[dict] = None,
        cover_photo: Optional[dict] = None
    ) -> dict:
        """
        Create the single profile for a College account.

        Args:
            college_id: College id of the authenticated account
            data: profile fields
            account_email: email from the token, last fallback for the profile email
            logo / cover_photo: media metadata of freshly uploaded files;
                these win over {url} links in `data`

        Raises:
            409 when the account already has a profile or the email is taken
        """
        college_oid = to_object_id(college_id, "college_id")
        if self.collection.find_one({"college": college_oid}, {"_id": 1}):
            raise HTTPException(status_code=409, detail="Profile already exists. Use update endpoint.")

        email = data.email or data.profile.contact.email or account_email
        if not email:
            raise HTTPException(status_code=400, detail="email is required")
        email = email.strip().lower()
        name = data.name or email.split("@")[0] or "College Admin"

        if self.collection.find_one({"email": email}, {"_id": 1}):
            raise HTTPException(status_code=409, detail="Email already used")

        if logo is None and data.logo:
            logo = media_from_link(data.logo.url)
        if cover_photo is None and data.cover_photo:
            cover_photo = media_from_link(data.cover_photo.url)

        doc = {
            "college": college_oid,
            "name": name,
            "email": email,
            "contact_number": data.contact_number,
            "permissions": [],
            "logo": logo,
            "cover_photo": cover_photo,
            "gallery": [],
            "profile": _profile_block(data.profile),
            "courses": [course.model_dump() for course in data.courses],
            "created_at": datetime.utcnow()
        }
        try:
            self.collection.insert_one(doc)
        except DuplicateKeyError:
            # lost a race against a concurrent create for the same account
            raise HTTPException(status_code=409, detail="Profile already exists (duplicate)")

        logger.info("College profile created for college %s", college_id)
        return serialize_doc(doc)

    def get(self, profile_id: Any) -> dict:
        doc = self.collection.find_one({"_id": to_object_id(profile_id)})
        if not doc:
            raise HTTPException(status_code=404, detail="Not found")
        return serialize_doc(doc)

    def find_for_college(self, college_id: Any) -> Optional[dict]:
        """Raw profile linked to a College account, None if not created yet."""
        return self.collection.find_one({"college": to_object_id(college_id, "college_id")})

    def get_for_college(self, college_id: Any) -> dict:
        doc = self.find_for_college(college_id)
        if not doc:
            raise HTTPException(status_code=404, detail="Profile not found")
        return serialize_doc(doc)

    def exists(self, profile_id: Any) -> bool:
        return self.collection.count_documents({"_id": to_object_id(profile_id)}, limit=1) > 0

    def list_all(self) -> List[dict]:
        return serialize_docs(list(self.collection.find().sort("created_at", -1)))

    def update(self, college_id: str, data: CollegeProfileUpdate) -> dict:
        """Update the caller's profile. Profile block and courses are replaced wholesale."""
        updates = {}
        if data.name:
            updates["name"] = data.name
        if data.contact_number:
            updates["contact_number"] = data.contact_number
        if data.profile is not None:
            updates["profile"] = _profile_block(data.profile)
        if data.courses is not None:
            updates["courses"] = [course.model_dump() for course in data.courses]
        if data.logo:
            updates["logo"] = media_from_link(data.logo.url)
        if data.cover_photo:
            updates["cover_photo"] = media_from_link(data.cover_photo.url)

        college_oid = to_object_id(college_id, "college_id")
        if not updates:
            return self.get_for_college(college_oid)

        doc = self.collection.find_one_and_update(
            {"college": college_oid},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        if not doc:
            raise HTTPException(status_code=404, detail="Profile not found")

        logger.info("College profile %s updated (%s)", doc["_id"], ", ".join(sorted(updates)))
        return serialize_doc(doc)

    def delete(self, profile_id: Any) -> None:
        # TODO: decide what happens to shortlists pointing at the profile before enabling deletes
        raise HTTPException(status_code=501, detail="Not implemented")


def get_college_profile_service() -> CollegeProfileService:
    """Get college profile service instance."""
    return CollegeProfileService()
