"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- The Actor passed explicitly into every portal operation
- FastAPI dependencies for protected routes
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from placecell.core.config import get_settings
from placecell.db.postgres import get_db
from placecell.models import User

logger = logging.getLogger(__name__)

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor
bearer_scheme = HTTPBearer()


@dataclass(frozen=True)
class Actor:
    """Who is performing an operation. Built from the token, never from globals."""
    user_id: int
    name: str
    role: str
    status: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_approved(self) -> bool:
        return self.status == "approved"

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(user_id=user.id, name=user.display_name, role=user.role, status=user.status)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    FastAPI dependency - Get current authenticated user, whatever their approval status.

    Usage:
        @app.get("/auth/me")
        async def route(user: User = Depends(get_current_user)):
            return user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if not payload:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    user = db.get(User, int(user_id))
    if not user:
        raise credentials_exception

    return user


async def get_current_actor(user: User = Depends(get_current_user)) -> Actor:
    """Dependency - Require an approved profile and return the acting Actor."""
    if user.status != "approved":
        logger.warning(f"Blocked {user.status} profile '{user.username}' from portal access")
        raise HTTPException(
            status_code=403,
            detail=f"Your access request is {user.status}. An admin must approve it first."
        )
    return Actor.from_user(user)


async def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    """Dependency - Require admin role."""
    if not actor.is_admin:
        raise HTTPException(status_code=403, detail="Admins only")
    return actor
