"""
Date Request Workflow

A coordinator who wants a date inside a blocked period files a request;
an admin approves or rejects it.

    pending --approve (response optional)--> approved
    pending --reject  (response required)--> rejected

Both outcomes are terminal. Approval does not create a drive: it lets the
requesting coordinator lock that date through POST /drives afterwards.
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from placecell.core.auth import Actor
from placecell.core.errors import ConflictError, NotFound, PermissionDenied, ValidationFailed, require_text
from placecell.models import Company, DateRequest, User
from placecell.schemas.schemas import DateRequestStatus, ProfileStatus

logger = logging.getLogger(__name__)


class DateRequestService:
    """Create, list and decide date requests."""

    def __init__(self, db: Session):
        self.db = db

    def list_requests(self, actor: Actor, status: Optional[DateRequestStatus] = None) -> List[DateRequest]:
        """Admins see every request; coordinators see their own. Newest first."""
        query = select(DateRequest).order_by(DateRequest.created_at.desc(), DateRequest.id.desc())
        if not actor.is_admin:
            query = query.where(DateRequest.coordinator_name == actor.name)
        if status:
            query = query.where(DateRequest.status == status.value)
        return list(self.db.scalars(query))

    def get_request(self, request_id: int) -> DateRequest:
        request = self.db.get(DateRequest, request_id)
        if not request:
            raise NotFound("Date request not found")
        return request

    def submit(
        self,
        actor: Actor,
        requested_date: date,
        description: Optional[str],
        company_id: Optional[int] = None
    ) -> DateRequest:
        """File a pending request. Description is the justification and is required."""
        description = require_text(description, "Description")

        known = self.db.scalar(
            select(User.id).where(
                User.display_name == actor.name,
                User.status == ProfileStatus.approved.value
            )
        )
        if not known:
            raise ValidationFailed(f"Unknown coordinator '{actor.name}'")

        if company_id is not None and not self.db.get(Company, company_id):
            raise NotFound("Company not found")

        request = DateRequest(
            company_id=company_id,
            requested_date=requested_date,
            coordinator_name=actor.name,
            description=description,
            status=DateRequestStatus.pending.value,
        )
        self.db.add(request)
        self.db.commit()
        self.db.refresh(request)

        logger.info(f"Date request {request.id} filed by {actor.name} for {requested_date}")
        return request

    def approve(self, actor: Actor, request_id: int, response: Optional[str] = None) -> DateRequest:
        """Admin approval; the response text is optional."""
        self._require_admin(actor)
        request = self._pending(request_id)

        request.status = DateRequestStatus.approved.value
        request.admin_response = response.strip() if response and response.strip() else None
        request.responded_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(request)

        logger.info(f"Date request {request.id} approved by {actor.name}")
        return request

    def reject(self, actor: Actor, request_id: int, response: Optional[str]) -> DateRequest:
        """Admin rejection; a reason must be given and is checked before anything is read or written."""
        self._require_admin(actor)
        reason = require_text(response, "Rejection reason")
        request = self._pending(request_id)

        request.status = DateRequestStatus.rejected.value
        request.admin_response = reason
        request.responded_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(request)

        logger.info(f"Date request {request.id} rejected by {actor.name}")
        return request

    def has_approved_request(self, coordinator_name: str, requested_date: date, company_id: int) -> bool:
        """Whether this coordinator holds an approval for the date (for this company or no company)."""
        query = select(DateRequest.id).where(
            DateRequest.coordinator_name == coordinator_name,
            DateRequest.requested_date == requested_date,
            DateRequest.status == DateRequestStatus.approved.value,
            (DateRequest.company_id == company_id) | (DateRequest.company_id.is_(None)),
        )
        return self.db.scalar(query.limit(1)) is not None

    def _pending(self, request_id: int) -> DateRequest:
        request = self.get_request(request_id)
        if request.status != DateRequestStatus.pending.value:
            logger.warning(f"Refused to re-decide date request {request_id} ({request.status})")
            raise ConflictError(f"Date request has already been {request.status}")
        return request

    @staticmethod
    def _require_admin(actor: Actor) -> None:
        if not actor.is_admin:
            raise PermissionDenied("Only admins can decide date requests")
