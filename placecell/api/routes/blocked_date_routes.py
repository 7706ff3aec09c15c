"""
Blocked Date Routes

GET    /blocked-dates - List blocked periods by start date
POST   /blocked-dates - Block a period (admin)
DELETE /blocked-dates/{id} - Remove a blocked period (admin)
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from placecell.core.auth import Actor, get_current_actor
from placecell.db.postgres import get_db
from placecell.schemas.schemas import BlockedDateCreate, BlockedDateResponse, MessageResponse
from placecell.services.blocked_date_service import BlockedDateService

router = APIRouter(prefix="/blocked-dates", tags=["Blocked Dates"])


@router.get("", response_model=List[BlockedDateResponse])
async def list_blocked_dates(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return BlockedDateService(db).list_blocked_dates()


@router.post("", response_model=BlockedDateResponse, status_code=201)
async def create_blocked_date(
    data: BlockedDateCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return BlockedDateService(db).create(actor, data.start_date, data.end_date, data.reason)


@router.delete("/{blocked_id}", response_model=MessageResponse)
async def delete_blocked_date(blocked_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    BlockedDateService(db).delete(actor, blocked_id)
    return MessageResponse(message="Blocked period removed")
