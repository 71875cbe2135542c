"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from capstone_portal.api.routes.auth_routes import router as auth_router
from capstone_portal.api.routes.profile_routes import router as profile_router
from capstone_portal.api.routes.reference_routes import router as reference_router
from capstone_portal.api.routes.student_routes import router as student_router
from capstone_portal.api.routes.faculty_routes import router as faculty_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(reference_router)
api_router.include_router(student_router)
api_router.include_router(faculty_router)
