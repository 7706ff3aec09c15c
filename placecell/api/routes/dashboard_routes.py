"""
Dashboard Routes

GET /dashboard/summary - Headline counts for the landing page
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from placecell.core.auth import Actor, get_current_actor
from placecell.db.postgres import get_db
from placecell.schemas.schemas import DashboardSummary
from placecell.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/summary", response_model=DashboardSummary)
async def get_summary(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return DashboardService(db).summary(actor)
