"""
Placement Cell Portal - Main Application

FastAPI backend with:
- PostgreSQL for companies, drives, date requests, tasks and email history
- MongoDB for registration form documents
- DeepSeek AI for form extraction and email drafts
- JWT authentication with admin-approved access

Run: uvicorn placecell.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from placecell.api.routes import api_router
from placecell.core.config import get_settings
from placecell.core.errors import PortalError
from placecell.db.mongodb import init_mongo_indexes, test_mongo_connection
from placecell.db.postgres import create_tables, get_db_session, test_postgres_connection
from placecell.services.account_service import AccountService

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, seed the admin account, prepare MongoDB indexes."""
    logger.info("Starting Placement Cell Portal")
    create_tables()
    with get_db_session() as db:
        AccountService(db).ensure_admin()

    try:
        init_mongo_indexes()
    except Exception as e:
        # Registration form uploads fail until MongoDB is back; everything else works
        logger.warning(f"MongoDB index initialization failed: {e}")

    yield
    logger.info("Shutting down Placement Cell Portal")


app = FastAPI(
    title="Placement Cell Portal",
    description="""
    Coordination backend for a university placement cell.

    ## Features
    - **Accounts**: Coordinator sign-up with admin approval
    - **Companies**: Records, contacts, blacklisting, AI-read registration forms
    - **Drives**: One company per date, locked by the scheduling coordinator
    - **Blocked dates & requests**: Admin-closed periods and exception approvals
    - **Tasks**: Coordinator reminders with due dates
    - **Email**: Templates, sending and history
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Placement Cell Portal"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Store connectivity."""
    return {
        "status": "healthy",
        "postgres": "connected" if test_postgres_connection() else "disconnected",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
