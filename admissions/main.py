"""
College Admissions Marketplace - Main Application

FastAPI backend with:
- MongoDB for accounts, college profiles and shortlists
- JWT authentication (student / college / admin)
- Local media uploads served from /uploads

Run: uvicorn admissions.main:app --reload
"""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from admissions.api.routes import api_router
from admissions.core.config import get_settings
from admissions.core.logging_config import setup_logging
from admissions.db.mongodb import init_mongo_indexes, test_mongo_connection

settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="College Admissions Marketplace",
    description="""
    Students shortlist colleges and courses, colleges manage their profiles,
    admins broker introductions.

    ## Features
    - **Authentication**: JWT-based auth for students, colleges and admins
    - **Shortlists**: Toggle/upsert interest with per-course entries
    - **Forwarding**: Admins finalize a student's choice and forward them to a college
    - **Directory**: Public, display-ready college listing
    - **Analytics**: Shortlist demand per college
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Browsers reject "*" with credentials
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")

# Serve uploaded media
os.makedirs(settings.upload_dir, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Anything that is not an HTTPException is a 500 with a logged traceback."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Server error"})


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
    except Exception:
        logger.exception("MongoDB index initialization failed")


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
