"""
Account Service - coordinator sign-up and admin access approval.

Profiles start as 'pending' when self-registered and only 'approved'
profiles may use the portal. Admin-created coordinators are approved
straight away.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from placecell.core.auth import Actor, hash_password, verify_password
from placecell.core.config import get_settings
from placecell.core.errors import ConflictError, NotFound, PermissionDenied
from placecell.models import User
from placecell.schemas.schemas import ProfileStatus, RegisterRequest, UserRole

logger = logging.getLogger(__name__)


class AccountService:

    def __init__(self, db: Session):
        self.db = db

    def register(self, data: RegisterRequest, status: ProfileStatus = ProfileStatus.pending) -> User:
        username = data.username.lower()
        if self.db.scalar(select(User.id).where(User.username == username)):
            raise ConflictError("Username already registered")
        display_name = data.display_name.strip()
        taken = self.db.scalar(select(User.id).where(func.lower(User.display_name) == display_name.lower()))
        if taken:
            raise ConflictError("Display name already in use")
        user = User(
            username=username,
            password_hash=hash_password(data.password),
            display_name=display_name,
            phone=data.phone,
            role=UserRole.coordinator.value,
            status=status.value,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Registered {user.username} ({user.status})")
        return user

    def authenticate(self, username: str, password: str) -> Optional[User]:
        user = self.db.scalar(select(User).where(User.username == username.lower()))
        if not user or not verify_password(password, user.password_hash):
            return None
        return user

    def list_profiles(self, status: Optional[ProfileStatus] = None) -> List[User]:
        query = select(User).order_by(User.created_at.desc(), User.id.desc())
        if status:
            query = query.where(User.status == status.value)
        return list(self.db.scalars(query))

    def list_coordinators(self) -> List[User]:
        """Approved people who can be named as a company's POC."""
        return list(self.db.scalars(
            select(User)
            .where(User.status == ProfileStatus.approved.value)
            .order_by(User.display_name)
        ))

    def create_coordinator(self, actor: Actor, data: RegisterRequest) -> User:
        self._require_admin(actor)
        user = self.register(data, status=ProfileStatus.approved)
        logger.info(f"{actor.name} created coordinator {user.display_name}")
        return user

    def set_status(self, actor: Actor, user_id: int, status: ProfileStatus) -> User:
        self._require_admin(actor)
        user = self.db.get(User, user_id)
        if not user:
            raise NotFound("Profile not found")
        if user.id == actor.user_id:
            raise PermissionDenied("You cannot change your own access")
        user.status = status.value
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"{actor.name} set {user.username} to {user.status}")
        return user

    def ensure_admin(self) -> Optional[User]:
        """Seed the configured admin account when no admin exists yet."""
        if self.db.scalar(select(User.id).where(User.role == UserRole.admin.value)):
            return None
        settings = get_settings()
        admin = User(
            username=settings.admin_username.lower(),
            password_hash=hash_password(settings.admin_password),
            display_name=settings.admin_display_name,
            role=UserRole.admin.value,
            status=ProfileStatus.approved.value,
        )
        self.db.add(admin)
        self.db.commit()
        self.db.refresh(admin)
        logger.info(f"Created admin account '{admin.username}'")
        return admin

    @staticmethod
    def _require_admin(actor: Actor) -> None:
        if not actor.is_admin:
            raise PermissionDenied("Admins only")
