"""Blocked periods - admin-declared date ranges closed to ordinary scheduling."""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from placecell.core.auth import Actor
from placecell.core.errors import NotFound, PermissionDenied, ValidationFailed, require_text
from placecell.models import BlockedDate

logger = logging.getLogger(__name__)


class BlockedDateService:

    def __init__(self, db: Session):
        self.db = db

    def list_blocked_dates(self) -> List[BlockedDate]:
        return list(self.db.scalars(
            select(BlockedDate).order_by(BlockedDate.start_date, BlockedDate.id)
        ))

    def create(self, actor: Actor, start_date: date, end_date: date, reason: Optional[str]) -> BlockedDate:
        """Overlapping ranges are allowed; each carries its own reason."""
        if not actor.is_admin:
            raise PermissionDenied("Only admins can block dates")
        reason = require_text(reason, "Reason")
        if start_date > end_date:
            raise ValidationFailed("Start date must be on or before end date")

        blocked = BlockedDate(start_date=start_date, end_date=end_date, reason=reason, created_by=actor.name)
        self.db.add(blocked)
        self.db.commit()
        self.db.refresh(blocked)

        logger.info(f"{actor.name} blocked {start_date}..{end_date}: {reason}")
        return blocked

    def delete(self, actor: Actor, blocked_id: int) -> None:
        if not actor.is_admin:
            raise PermissionDenied("Only admins can unblock dates")
        blocked = self.db.get(BlockedDate, blocked_id)
        if not blocked:
            raise NotFound("Blocked period not found")
        self.db.delete(blocked)
        self.db.commit()
        logger.info(f"{actor.name} removed blocked period {blocked_id}")
