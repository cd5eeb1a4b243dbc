"""
Authentication Routes

POST /auth/student/register - Register student account
POST /auth/student/login    - Student login
POST /auth/college/register - Register college account
POST /auth/college/login    - College login
POST /auth/admin/register   - Register admin account
POST /auth/admin/login      - Admin login
"""

from datetime import datetime, time
from fastapi import APIRouter, HTTPException

from admissions.core.auth import hash_password, verify_password, create_user_token
from admissions.services.mongo_service import (
    StudentService, CollegeService, AdminService, get_account_service, PASSWORD_FIELD
)
from admissions.schemas.schemas import (
    StudentRegister, CollegeRegister, AdminRegister, LoginRequest,
    TokenResponse, MessageResponse, UserRole
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _login(role: UserRole, request: LoginRequest, message: str) -> TokenResponse:
    account = get_account_service(role.value).get_by_email(request.email)
    if not account or not verify_password(request.password, account[PASSWORD_FIELD]):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    user_id = str(account["_id"])
    token = create_user_token(user_id, role, account["email"])
    return TokenResponse(message=message, access_token=token, user_id=user_id, role=role)


@router.post("/student/register", response_model=MessageResponse, status_code=201)
async def register_student(request: StudentRegister):
    """Register a student account. Login afterwards to get a token."""
    StudentService().register(
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        phone=request.phone,
        # BSON has no date type
        date_of_birth=datetime.combine(request.date_of_birth, time.min),
        education=request.education,
        password_hash=hash_password(request.password)
    )
    return MessageResponse(message="Student registered successfully")


@router.post("/student/login", response_model=TokenResponse)
async def login_student(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    return _login(UserRole.student, request, "Logged in")


@router.post("/college/register", response_model=MessageResponse, status_code=201)
async def register_college(request: CollegeRegister):
    CollegeService().register(
        institute_code=request.institute_code,
        name=request.name,
        email=request.email,
        password_hash=hash_password(request.password),
        contact_number=request.contact_number
    )
    return MessageResponse(message="College registered")


@router.post("/college/login", response_model=TokenResponse)
async def login_college(request: LoginRequest):
    return _login(UserRole.college, request, "College logged in")


@router.post("/admin/register", response_model=MessageResponse, status_code=201)
async def register_admin(request: AdminRegister):
    AdminService().register(
        name=request.name,
        email=request.email,
        password_hash=hash_password(request.password)
    )
    return MessageResponse(message="Admin registered")


@router.post("/admin/login", response_model=TokenResponse)
async def login_admin(request: LoginRequest):
    return _login(UserRole.admin, request, "Admin logged in")
