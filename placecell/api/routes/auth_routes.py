"""
Authentication Routes

POST /auth/register - Request access (profile starts pending)
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info, whatever the approval status
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from placecell.core.auth import create_access_token, get_current_user
from placecell.db.postgres import get_db
from placecell.models import User
from placecell.schemas.schemas import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from placecell.services.account_service import AccountService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    Request portal access.

    The profile stays 'pending' until an admin approves it; logging in works
    before that but portal operations answer 403.
    """
    return AccountService(db).register(request)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = AccountService(db).authenticate(request.username, request.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid username or password")

    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    return TokenResponse(access_token=token, user_id=user.id, role=user.role, status=user.status)


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)):
    return user
