"""
Account Routes

GET  /admin/profiles - List access requests (admin)
POST /admin/profiles/{id}/approve - Grant access (admin)
POST /admin/profiles/{id}/reject - Refuse access (admin)
POST /admin/coordinators - Create an approved coordinator (admin)
GET  /coordinators - Approved people, for POC pickers
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from placecell.core.auth import Actor, get_current_actor, require_admin
from placecell.db.postgres import get_db
from placecell.schemas.schemas import CoordinatorResponse, ProfileStatus, RegisterRequest, UserResponse
from placecell.services.account_service import AccountService

router = APIRouter(tags=["Accounts"])


@router.get("/admin/profiles", response_model=List[UserResponse])
async def list_profiles(
    status: Optional[ProfileStatus] = Query(None),
    admin: Actor = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return AccountService(db).list_profiles(status)


@router.post("/admin/profiles/{user_id}/approve", response_model=UserResponse)
async def approve_profile(user_id: int, admin: Actor = Depends(require_admin), db: Session = Depends(get_db)):
    return AccountService(db).set_status(admin, user_id, ProfileStatus.approved)


@router.post("/admin/profiles/{user_id}/reject", response_model=UserResponse)
async def reject_profile(user_id: int, admin: Actor = Depends(require_admin), db: Session = Depends(get_db)):
    return AccountService(db).set_status(admin, user_id, ProfileStatus.rejected)


@router.post("/admin/coordinators", response_model=UserResponse, status_code=201)
async def create_coordinator(
    data: RegisterRequest,
    admin: Actor = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return AccountService(db).create_coordinator(admin, data)


@router.get("/coordinators", response_model=List[CoordinatorResponse])
async def list_coordinators(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return AccountService(db).list_coordinators()
