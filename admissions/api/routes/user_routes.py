"""
User Routes (admin side of the admissions workflow)

GET  /users                      - List students (admin)
GET  /users/verify               - Check a token
GET  /users/{student_id}/info    - Full student record (admin)
GET  /users/{student_id}/details - Student + course selections (admin)
PUT  /users/{student_id}/finalize - Set finalized college/course (admin)
POST /users/forward              - Forward a student to a college (admin)
"""

from fastapi import APIRouter, Depends

from admissions.core.auth import get_current_user, get_current_admin
from admissions.services.mongo_service import StudentService
from admissions.services.forwarding_service import get_forwarding_service
from admissions.schemas.schemas import CurrentUser, FinalizeRequest, ForwardRequest

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("")
async def list_students(admin: CurrentUser = Depends(get_current_admin)):
    return {"users": StudentService().list_all()}


@router.get("/verify")
async def verify_token(user: CurrentUser = Depends(get_current_user)):
    return {"message": "Token valid", "email": user.email, "role": user.role}


@router.get("/{student_id}/info")
async def student_info(student_id: str, admin: CurrentUser = Depends(get_current_admin)):
    return {"success": True, "student": get_forwarding_service().student_info(student_id)}


@router.get("/{student_id}/details")
async def student_details(student_id: str, admin: CurrentUser = Depends(get_current_admin)):
    return get_forwarding_service().student_details(student_id)


@router.put("/{student_id}/finalize")
async def finalize_student(
    student_id: str,
    data: FinalizeRequest,
    admin: CurrentUser = Depends(get_current_admin)
):
    """Record the college or course the student settled on."""
    student = get_forwarding_service().finalize(student_id, data.field, data.value)
    return {"message": "Student updated successfully", "student": student}


@router.post("/forward")
async def forward_student(data: ForwardRequest, admin: CurrentUser = Depends(get_current_admin)):
    """
    Forward a finalized student to a college they shortlisted.

    400 if the student's college/course are not finalized,
    404 if the student never shortlisted that college.
    """
    forwarded = get_forwarding_service().forward(
        data.student_id, data.college_id, courses=data.courses, notes=data.notes
    )
    return {"message": "Student forwarded successfully", "forwarded": forwarded}
