"""
Jobboard - Main Application

FastAPI backend with:
- PostgreSQL for structured data (users, companies, jobs, applications, scores)
- MongoDB for documents (resumes, personality reports)
- OpenAI-compatible generative AI for match scoring, personality analysis,
  productivity scoring and resume parsing
- JWT authentication

Run: uvicorn jobboard.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobboard import __version__
from jobboard.api.routes import api_router
from jobboard.core.config import get_settings
from jobboard.core.errors import AppError, app_error_handler
from jobboard.db.mongodb import init_mongo_indexes, test_mongo_connection
from jobboard.db.postgres import test_postgres_connection

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="""
    Job board with AI-assisted hiring.

    ## Features
    - **Authentication**: JWT auth for job seekers and employers, password reset by email
    - **Profiles**: Job seeker profiles (skills, experience, education) and company profiles
    - **Jobs**: Posting, publishing and searching jobs
    - **Applications**: Apply, review, move through the hiring pipeline with email notifications
    - **AI**: Match scores, personality analysis, productivity scoring, resume parsing

    ## Databases
    - PostgreSQL: Structured data
    - MongoDB: Resumes and full personality reports
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AppError, app_error_handler)

# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


def service_status() -> dict:
    return {
        "postgres": "connected" if test_postgres_connection() else "disconnected",
        "mongodb": "connected" if test_mongo_connection() else "disconnected",
        "ai": "configured" if settings.ai_configured else "not configured",
    }


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": settings.app_name, "version": __version__, "docs": "/docs"}


@app.get("/health", tags=["Health"])
def health_check():
    """Detailed health check."""
    services = service_status()
    healthy = services["postgres"] == "connected" and services["mongodb"] == "connected"
    return {"status": "healthy" if healthy else "degraded", "api": "running", **services}
