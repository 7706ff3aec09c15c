"""
Drive Routes

GET    /drives - List drives (optional company filter), by date
GET    /drives/availability - Blocked/locked check for one date
GET    /drives/calendar - Per-day blocked/locked flags over a range
POST   /drives - Lock a date for a company (201), or file a date request (202)
PUT    /drives/{id} - Holder edits drive details
DELETE /drives/{id} - Holder unlocks the date
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from placecell.core.auth import Actor, get_current_actor
from placecell.db.postgres import get_db
from placecell.schemas.schemas import (
    AvailabilityResponse, BlockedDateResponse, CalendarDay, DateRequestResponse, DriveCreate,
    DriveResponse, DriveUpdate, MessageResponse, ScheduleOutcome
)
from placecell.services.drive_service import DriveService

router = APIRouter(prefix="/drives", tags=["Drives"])


@router.get("", response_model=List[DriveResponse])
async def list_drives(
    company_id: Optional[int] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return DriveService(db).list_drives(company_id)


@router.get("/availability", response_model=AvailabilityResponse)
async def check_availability(
    date: date = Query(..., description="Candidate drive date"),
    company_id: Optional[int] = Query(None, description="Drives of this company do not count as locks"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    conflicts = DriveService(db).check_date(date, company_id)
    return AvailabilityResponse(
        date=conflicts.candidate,
        is_blocked=conflicts.is_blocked,
        is_locked=conflicts.is_locked,
        blocked_by=BlockedDateResponse.model_validate(conflicts.blocked) if conflicts.blocked else None,
        locked_by=DriveResponse.model_validate(conflicts.locked) if conflicts.locked else None,
    )


@router.get("/calendar", response_model=List[CalendarDay])
async def calendar(
    start: date = Query(...),
    end: date = Query(...),
    company_id: Optional[int] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    """Date-picker highlighting, computed by the same checks POST /drives enforces."""
    return [
        CalendarDay(
            date=day.candidate,
            is_blocked=day.is_blocked,
            is_locked=day.is_locked,
            reason=day.blocked.reason if day.blocked else None,
            locked_by=day.locked.coordinator_name if day.locked else None,
        )
        for day in DriveService(db).calendar(start, end, company_id)
    ]


@router.post("", response_model=ScheduleOutcome, status_code=201)
async def schedule_drive(
    data: DriveCreate,
    response: Response,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    """
    Lock a date for a company.

    A blocked date needs an approved date request. Send request_description
    to file one in the same call; the answer is then 202 with the request.
    """
    result = DriveService(db).schedule(actor, data)
    if result.locked:
        return ScheduleOutcome(
            outcome="locked",
            message=f"{result.drive.drive_date} locked for {result.drive.company_name}",
            drive=DriveResponse.model_validate(result.drive),
        )

    response.status_code = 202
    return ScheduleOutcome(
        outcome="request_created",
        message="Date is blocked. Your request has been sent to the admin.",
        date_request=DateRequestResponse.model_validate(result.date_request),
    )


@router.put("/{drive_id}", response_model=DriveResponse)
async def update_drive(
    drive_id: int,
    data: DriveUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return DriveService(db).update(actor, drive_id, data)


@router.delete("/{drive_id}", response_model=MessageResponse)
async def unlock_drive(drive_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    DriveService(db).unlock(actor, drive_id)
    return MessageResponse(message="Date unlocked")
