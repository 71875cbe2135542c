"""
Capstone Portal - Main Application

FastAPI backend with:
- MongoDB for profiles and applications
- Identity-provider JWT sessions
- Admission policy: application slot cap, faculty intake limits,
  transactional accept cascade

Run: uvicorn capstone_portal.main:app --reload
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from capstone_portal.api.routes import api_router
from capstone_portal.core.config import get_settings
from capstone_portal.core.errors import register_exception_handlers
from capstone_portal.core.logger import configure_logging, get_logger
from capstone_portal.db.mongodb import init_mongo_indexes, test_mongo_connection

settings = get_settings()
configure_logging(settings.log_level, json_output=settings.log_json)
logger = get_logger("main")

# Create FastAPI app
app = FastAPI(
    title="Capstone Portal",
    description="""
    Capstone-project matching between students and faculty.

    ## Features
    - **Sessions**: identity-provider tokens, first login creates the user record
    - **Profile setup**: student academic data and team, or faculty departments/domains/limits
    - **Students**: browse faculty, apply (at most 5 open applications), withdraw
    - **Faculty**: accept or reject within per-category intake limits

    ## Database
    - MongoDB: users, facultyApplications, departments, domains
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
    except PyMongoError as e:
        logger.warning("MongoDB index initialization failed", error=str(e))


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
