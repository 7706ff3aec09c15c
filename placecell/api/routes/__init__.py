"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from placecell.api.routes.auth_routes import router as auth_router
from placecell.api.routes.account_routes import router as account_router
from placecell.api.routes.company_routes import router as company_router
from placecell.api.routes.drive_routes import router as drive_router
from placecell.api.routes.blocked_date_routes import router as blocked_date_router
from placecell.api.routes.date_request_routes import router as date_request_router
from placecell.api.routes.task_routes import router as task_router
from placecell.api.routes.email_routes import router as email_router
from placecell.api.routes.dashboard_routes import router as dashboard_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(account_router)
api_router.include_router(company_router)
api_router.include_router(drive_router)
api_router.include_router(blocked_date_router)
api_router.include_router(date_request_router)
api_router.include_router(task_router)
api_router.include_router(email_router)
api_router.include_router(dashboard_router)
