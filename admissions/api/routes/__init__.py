"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from admissions.api.routes.auth_routes import router as auth_router
from admissions.api.routes.user_routes import router as user_router
from admissions.api.routes.shortlist_routes import router as shortlist_router
from admissions.api.routes.college_admin_routes import router as college_admin_router
from admissions.api.routes.college_routes import router as college_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(shortlist_router)
api_router.include_router(college_admin_router)
api_router.include_router(college_router)
