"""
Date Request Routes

GET  /date-requests - Admin: all requests; coordinator: own. Newest first.
POST /date-requests - Ask for a blocked date
POST /date-requests/{id}/approve - Approve (admin, response optional)
POST /date-requests/{id}/reject - Reject (admin, reason required)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from placecell.core.auth import Actor, get_current_actor
from placecell.db.postgres import get_db
from placecell.schemas.schemas import (
    DateRequestCreate, DateRequestDecision, DateRequestResponse, DateRequestStatus
)
from placecell.services.date_request_service import DateRequestService

router = APIRouter(prefix="/date-requests", tags=["Date Requests"])


@router.get("", response_model=List[DateRequestResponse])
async def list_date_requests(
    status: Optional[DateRequestStatus] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return DateRequestService(db).list_requests(actor, status)


@router.post("", response_model=DateRequestResponse, status_code=201)
async def create_date_request(
    data: DateRequestCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return DateRequestService(db).submit(actor, data.requested_date, data.description, company_id=data.company_id)


@router.post("/{request_id}/approve", response_model=DateRequestResponse)
async def approve_date_request(
    request_id: int,
    data: Optional[DateRequestDecision] = None,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return DateRequestService(db).approve(actor, request_id, data.response if data else None)


@router.post("/{request_id}/reject", response_model=DateRequestResponse)
async def reject_date_request(
    request_id: int,
    data: DateRequestDecision,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return DateRequestService(db).reject(actor, request_id, data.response)
