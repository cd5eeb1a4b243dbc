"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Union
from datetime import date, datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    college = "college"
    admin = "admin"


class FinalizeField(str, Enum):
    college = "college"
    course = "course"


class AdmissionState(str, Enum):
    prospecting = "prospecting"
    finalized = "finalized"
    forwarded = "forwarded"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class StudentRegister(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=5, max_length=20)
    password: str = Field(..., min_length=6)
    date_of_birth: date
    education: str = Field(..., min_length=1)

class CollegeRegister(BaseModel):
    institute_code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=2, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=6)
    contact_number: Optional[str] = None

class AdminRegister(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: UserRole

class CurrentUser(BaseModel):
    """Identity resolved from a bearer token."""
    id: str
    role: UserRole
    email: Optional[str] = None


# ============================================================
# COLLEGE PROFILE SCHEMAS
# ============================================================

class Media(BaseModel):
    url: Optional[str] = None
    filename: Optional[str] = None
    size: Optional[int] = None
    uploaded_at: Optional[datetime] = None

class MediaLink(BaseModel):
    url: str

class Address(BaseModel):
    line1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    country: Optional[str] = None

class Contact(BaseModel):
    primary_phone: Optional[str] = None
    secondary_phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None

class SubCourse(BaseModel):
    name: str
    fee: Optional[str] = None
    eligibility: List[str] = []

class Course(BaseModel):
    name: str
    sub_courses: List[SubCourse] = []

class CollegeProfileContent(BaseModel):
    description: str = ""
    features: List[str] = []
    address: Union[Address, str, None] = None
    google_location: str = ""
    contact: Contact = Contact()
    videos: List[str] = []

class CollegeProfileCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    contact_number: Optional[str] = None
    profile: CollegeProfileContent = CollegeProfileContent()
    courses: List[Course] = []
    logo: Optional[MediaLink] = None
    cover_photo: Optional[MediaLink] = None

class CollegeProfileUpdate(BaseModel):
    name: Optional[str] = None
    contact_number: Optional[str] = None
    profile: Optional[CollegeProfileContent] = None
    courses: Optional[List[Course]] = None
    logo: Optional[MediaLink] = None
    cover_photo: Optional[MediaLink] = None


# ============================================================
# SHORTLIST SCHEMAS
# ============================================================

class InterestedCourse(BaseModel):
    parent: Optional[str] = None
    name: Optional[str] = None

class ShortlistCreate(BaseModel):
    college_id: str
    notes: Optional[str] = None
    # None means "leave the stored list alone"
    interested_courses: Optional[List[InterestedCourse]] = None

class ShortlistToggle(BaseModel):
    college_id: str
    interested_courses: Optional[List[InterestedCourse]] = None

class ShortlistStat(BaseModel):
    college_admin_id: str
    name: str
    email: Optional[str] = None
    count: int
    latest: Optional[datetime] = None

class ShortlistStatsResponse(BaseModel):
    data: List[ShortlistStat]


# ============================================================
# FINALIZATION / FORWARDING SCHEMAS
# ============================================================

class FinalizeRequest(BaseModel):
    field: FinalizeField
    value: str

class ForwardRequest(BaseModel):
    student_id: str
    college_id: str
    courses: List[str] = []
    notes: Optional[str] = None


# ============================================================
# DIRECTORY SCHEMAS
# ============================================================

class DirectoryEntry(BaseModel):
    id: str
    college_id: Optional[str] = None
    name: str
    email: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    contact_number: str = ""
    logo: Optional[str] = None
    cover_photo: Optional[str] = None
    course: str
    courses: List[str] = []
    created_at: Optional[datetime] = None

class DirectoryResponse(BaseModel):
    data: List[DirectoryEntry]


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
