"""
College Profile Routes

GET    /college-admins                    - List all profiles (admin)
POST   /college-admins/profile            - Create own profile (college, multipart)
GET    /college-admins/profile            - Get own profile (college)
PUT    /college-admins/profile            - Update own profile (college)
POST   /college-admins/upload             - Upload one media file (college)
GET    /college-admins/forwarded-students - Students forwarded by admins (college)
GET    /college-admins/{id}               - Public profile
DELETE /college-admins/{id}               - Delete profile (admin, not implemented)
"""

import json
from fastapi import APIRouter, HTTPException, Depends, UploadFile, File, Form
from pydantic import ValidationError
from typing import Optional

from admissions.core.auth import get_current_college, get_current_admin
from admissions.services.college_profile_service import get_college_profile_service
from admissions.services.forwarding_service import get_forwarding_service
from admissions.services.shortlist_service import get_shortlist_service
from admissions.utils.file_upload import save_media_file
from admissions.schemas.schemas import (
    CurrentUser, CollegeProfileCreate, CollegeProfileUpdate, Media, MessageResponse
)

router = APIRouter(prefix="/college-admins", tags=["College Profiles"])


def _parse_json_field(raw: Optional[str], fallback):
    """Multipart forms send nested objects as JSON strings."""
    if not raw:
        return fallback
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Malformed JSON in form field")


@router.get("")
async def list_profiles(admin: CurrentUser = Depends(get_current_admin)):
    """Every profile with the course names its students are interested in."""
    demand = get_shortlist_service().aggregate_course_interest_by_college()
    profiles = get_college_profile_service().list_all()
    for profile in profiles:
        profile["aggregated_courses"] = demand.get(profile["_id"], [])
    return {"data": profiles}


@router.post("/profile", status_code=201)
async def create_profile(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    contact_number: Optional[str] = Form(None),
    profile: Optional[str] = Form(None, description="JSON profile block"),
    courses: Optional[str] = Form(None, description="JSON course list"),
    logo: Optional[UploadFile] = File(None),
    cover_photo: Optional[UploadFile] = File(None),
    college: CurrentUser = Depends(get_current_college)
):
    """
    Create the profile for the authenticated college account (once).

    Uploaded logo/cover files are stored and take precedence over URLs.
    """
    try:
        data = CollegeProfileCreate(
            name=name,
            email=email,
            contact_number=contact_number,
            profile=_parse_json_field(profile, {}),
            courses=_parse_json_field(courses, [])
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    logo_meta = await save_media_file(logo) if logo and logo.filename else None
    cover_meta = await save_media_file(cover_photo) if cover_photo and cover_photo.filename else None

    doc = get_college_profile_service().create(
        college.id, data, account_email=college.email, logo=logo_meta, cover_photo=cover_meta
    )
    return {"message": "College admin profile created", "data": doc}


@router.get("/profile")
async def get_my_profile(college: CurrentUser = Depends(get_current_college)):
    return get_college_profile_service().get_for_college(college.id)


@router.put("/profile")
async def update_my_profile(data: CollegeProfileUpdate, college: CurrentUser = Depends(get_current_college)):
    doc = get_college_profile_service().update(college.id, data)
    return {"message": "Profile updated", "data": doc}


@router.post("/upload", response_model=Media, status_code=201)
async def upload_media(
    file: UploadFile = File(..., description="Image file (max 5MB)"),
    college: CurrentUser = Depends(get_current_college)
):
    """Store an image and return its URL for a later profile update."""
    return await save_media_file(file)


@router.get("/forwarded-students")
async def forwarded_students(college: CurrentUser = Depends(get_current_college)):
    """Students the platform admins forwarded to this college."""
    profile = get_college_profile_service().find_for_college(college.id)
    if not profile:
        raise HTTPException(status_code=404, detail="College admin profile not found")
    return {"students": get_forwarding_service().list_forwarded_to_college(profile["_id"])}


@router.get("/{profile_id}")
async def get_profile(profile_id: str):
    return {"data": get_college_profile_service().get(profile_id)}


@router.delete("/{profile_id}", response_model=MessageResponse)
async def delete_profile(profile_id: str, admin: CurrentUser = Depends(get_current_admin)):
    get_college_profile_service().delete(profile_id)
    return MessageResponse(message="Deleted")
