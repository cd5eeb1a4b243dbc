"""
Shortlist Routes

GET    /shortlists/my-shortlists               - Student's shortlists (college cards)
GET    /shortlists                             - Student's shortlists (detailed); admins pass ?student=
POST   /shortlists                             - Add / update interest (upsert)
POST   /shortlists/toggle                      - Toggle interest
DELETE /shortlists/{college_id}                - Remove interest
GET    /shortlists/stats/aggregate             - Demand per college (admin)
GET    /shortlists/college[/{college_admin_id}] - Interested students (admin or the college)
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from typing import Optional

from admissions.core.auth import get_current_user, get_current_student, get_current_admin, require_roles
from admissions.services.shortlist_service import get_shortlist_service
from admissions.services.college_profile_service import get_college_profile_service
from admissions.schemas.schemas import (
    CurrentUser, ShortlistCreate, ShortlistToggle, ShortlistStatsResponse, MessageResponse, UserRole
)

router = APIRouter(prefix="/shortlists", tags=["Shortlists"])


def resolve_college_admin_id(user: CurrentUser, requested: Optional[str]) -> Optional[str]:
    """
    Profile id the caller may read.
    Admins read any profile they name; a college reads only its own profile.
    """
    if user.role == UserRole.admin:
        return requested

    own = get_college_profile_service().find_for_college(user.id)
    if not own:
        return None
    own_id = str(own["_id"])
    if requested and requested != own_id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return own_id


@router.get("/my-shortlists")
async def my_shortlists(student: CurrentUser = Depends(get_current_student)):
    """Current student's shortlists populated with college name, profile and logo."""
    return {"shortlists": get_shortlist_service().list_for_student(student.id)}


@router.get("")
async def list_shortlisted(
    student: Optional[str] = Query(None, description="Student id (admins only)"),
    user: CurrentUser = Depends(get_current_user)
):
    """Shortlists with college details. Students see their own."""
    if user.role == UserRole.student:
        student_id = user.id
    elif user.role == UserRole.admin:
        if not student:
            raise HTTPException(status_code=400, detail="student id required")
        student_id = student
    else:
        raise HTTPException(status_code=403, detail="Forbidden")

    return {"data": get_shortlist_service().list_detailed_for_student(student_id)}


@router.post("", status_code=201)
async def add_shortlist(data: ShortlistCreate, student: CurrentUser = Depends(get_current_student)):
    """
    Shortlist a college (201), or replace the interested courses of an existing
    entry (200). Notes are stored only when the entry is first created.
    """
    result = get_shortlist_service().add_or_update_interest(
        student.id, data.college_id, notes=data.notes, interested_courses=data.interested_courses
    )
    if not result.pop("created"):
        return JSONResponse(status_code=200, content=jsonable_encoder(result))
    return result


@router.post("/toggle")
async def toggle_shortlist(data: ShortlistToggle, student: CurrentUser = Depends(get_current_student)):
    """Shortlist the college if it isn't, otherwise remove it."""
    result = get_shortlist_service().toggle_interest(
        student.id, data.college_id, interested_courses=data.interested_courses
    )
    status_code = 201 if result.pop("created") else 200
    return JSONResponse(status_code=status_code, content=jsonable_encoder(result))


@router.delete("/{college_id}", response_model=MessageResponse)
async def remove_shortlist(college_id: str, student: CurrentUser = Depends(get_current_student)):
    get_shortlist_service().remove_interest(student.id, college_id)
    return MessageResponse(message="Removed from shortlist")


@router.get("/stats/aggregate", response_model=ShortlistStatsResponse)
async def shortlist_stats(admin: CurrentUser = Depends(get_current_admin)):
    """Shortlist count and latest shortlist per college, most shortlisted first."""
    return ShortlistStatsResponse(data=get_shortlist_service().stats_across_colleges())


@router.get("/college")
@router.get("/college/{college_admin_id}")
async def list_students_for_college(
    college_admin_id: Optional[str] = None,
    user: CurrentUser = Depends(require_roles(UserRole.admin, UserRole.college))
):
    """Students who shortlisted a college, with their interested courses."""
    profile_id = resolve_college_admin_id(user, college_admin_id)
    return get_shortlist_service().list_for_college(profile_id)
