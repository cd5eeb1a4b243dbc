"""
College Directory Routes

GET /colleges            - Public directory listing
GET /colleges/registered - Raw College registrations (admin)
"""

from fastapi import APIRouter, Depends

from admissions.core.auth import get_current_admin
from admissions.services.directory_service import get_directory_service
from admissions.schemas.schemas import CurrentUser, DirectoryResponse

router = APIRouter(prefix="/colleges", tags=["Colleges"])


@router.get("", response_model=DirectoryResponse)
async def list_colleges():
    """Display-ready listing: name, location, contact, media and course names."""
    return DirectoryResponse(data=get_directory_service().list_directory())


@router.get("/registered")
async def registered_colleges(admin: CurrentUser = Depends(get_current_admin)):
    return {"data": get_directory_service().list_registered_colleges()}
