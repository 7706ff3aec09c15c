"""
Campus Drive Service - drives double as date locks.

Lock lifecycle for a (date, company):

    unlocked --lock--> scheduled --unlock (holder only)--> unlocked

Locking runs the date conflict evaluator over a fresh snapshot of blocked
periods and scheduled drives:
- date locked by another company -> ConflictError naming holder and company
- date blocked, no approval      -> file a date request, or DateBlocked
- otherwise                      -> insert the drive

The partial unique index on campus_drives(drive_date) WHERE status =
'scheduled' settles races between coordinators: the losing insert is
turned into the same ConflictError.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from placecell.core.auth import Actor
from placecell.core.errors import ConflictError, DateBlocked, NotFound, PermissionDenied, ValidationFailed
from placecell.models import BlockedDate, CampusDrive, Company, DateRequest
from placecell.schemas.schemas import DriveCreate, DriveStatus, DriveUpdate
from placecell.services.date_conflicts import DateConflicts, evaluate_date, evaluate_range
from placecell.services.date_request_service import DateRequestService

logger = logging.getLogger(__name__)

MAX_CALENDAR_DAYS = 366


@dataclass
class ScheduleResult:
    drive: Optional[CampusDrive] = None
    date_request: Optional[DateRequest] = None

    @property
    def locked(self) -> bool:
        return self.drive is not None


class DriveService:

    def __init__(self, db: Session):
        self.db = db
        self.requests = DateRequestService(db)

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def list_drives(self, company_id: Optional[int] = None) -> List[CampusDrive]:
        query = select(CampusDrive).order_by(CampusDrive.drive_date, CampusDrive.id)
        if company_id is not None:
            query = query.where(CampusDrive.company_id == company_id)
        return list(self.db.scalars(query))

    def get_drive(self, drive_id: int) -> CampusDrive:
        drive = self.db.get(CampusDrive, drive_id)
        if not drive:
            raise NotFound("Drive not found")
        return drive

    def snapshot(self):
        """Blocked periods (by start date) and scheduled drives, as one consistent read."""
        blocked = list(self.db.scalars(
            select(BlockedDate).order_by(BlockedDate.start_date, BlockedDate.id)
        ))
        drives = list(self.db.scalars(
            select(CampusDrive).where(CampusDrive.status == DriveStatus.scheduled.value)
        ))
        return blocked, drives

    def check_date(self, drive_date: date, company_id: Optional[int] = None) -> DateConflicts:
        blocked, drives = self.snapshot()
        return evaluate_date(drive_date, blocked, drives, excluding_company_id=company_id)

    def calendar(self, start: date, end: date, company_id: Optional[int] = None) -> List[DateConflicts]:
        if start > end:
            raise ValidationFailed("Start date must be on or before end date")
        if (end - start).days >= MAX_CALENDAR_DAYS:
            raise ValidationFailed(f"Calendar range is limited to {MAX_CALENDAR_DAYS} days")
        blocked, drives = self.snapshot()
        return evaluate_range(start, end, blocked, drives, excluding_company_id=company_id)

    # ------------------------------------------------------------
    # Lock / unlock
    # ------------------------------------------------------------

    def schedule(self, actor: Actor, data: DriveCreate) -> ScheduleResult:
        """
        Lock data.drive_date for data.company_id.

        Returns ScheduleResult.drive on success, or ScheduleResult.date_request
        when the date is blocked and a justification was supplied.
        """
        company = self.db.get(Company, data.company_id)
        if not company:
            raise NotFound("Company not found")

        conflicts = self.check_date(data.drive_date, company_id=company.id)

        if conflicts.is_locked:
            holder = conflicts.locked
            raise self._locked_error(holder)

        if conflicts.is_blocked and not self.requests.has_approved_request(actor.name, data.drive_date, company.id):
            blocked = conflicts.blocked
            if data.request_description and data.request_description.strip():
                request = self.requests.submit(
                    actor, data.drive_date, data.request_description, company_id=company.id
                )
                return ScheduleResult(date_request=request)
            logger.warning(f"{actor.name} tried to lock blocked date {data.drive_date} ({blocked.reason})")
            raise DateBlocked(
                f"This date is in a blocked period: {blocked.reason}. "
                "Admin approval is needed to schedule on this date.",
                extra={
                    "blocked_date_id": blocked.id,
                    "reason": blocked.reason,
                    "start_date": blocked.start_date.isoformat(),
                    "end_date": blocked.end_date.isoformat(),
                },
            )

        drive = CampusDrive(
            company_id=company.id,
            coordinator_name=actor.name,
            drive_date=data.drive_date,
            drive_time=data.drive_time,
            venue=data.venue,
            notes=data.notes,
            min_cgpa=data.min_cgpa,
            eligible_branches=data.eligible_branches,
            registered_count=0,
            appeared_count=0,
            selected_count=0,
            status=DriveStatus.scheduled.value,
        )
        self.db.add(drive)
        try:
            self.db.commit()
        except IntegrityError:
            # Someone else locked the date between our read and our write
            self.db.rollback()
            holder = self.db.scalar(
                select(CampusDrive).where(
                    CampusDrive.drive_date == data.drive_date,
                    CampusDrive.status == DriveStatus.scheduled.value,
                )
            )
            if holder is None:
                raise
            raise self._locked_error(holder)

        self.db.refresh(drive)
        logger.info(f"{actor.name} locked {drive.drive_date} for {company.name} (drive {drive.id})")
        return ScheduleResult(drive=drive)

    def update(self, actor: Actor, drive_id: int, data: DriveUpdate) -> CampusDrive:
        """Holder edits time, venue, notes and turnout counts."""
        drive = self._held_by(actor, drive_id, "update")
        for field, value in data.model_dump(exclude_unset=True).items():
            if field.endswith("_count") and value is None:
                continue
            setattr(drive, field, value)
        self.db.commit()
        self.db.refresh(drive)
        return drive

    def unlock(self, actor: Actor, drive_id: int) -> None:
        """Delete the drive, releasing its date. Only the coordinator who locked it may do this."""
        drive = self._held_by(actor, drive_id, "unlock")
        drive_date, company_name = drive.drive_date, drive.company_name
        self.db.delete(drive)
        self.db.commit()
        logger.info(f"{actor.name} unlocked {drive_date} for {company_name}")

    def _held_by(self, actor: Actor, drive_id: int, action: str) -> CampusDrive:
        drive = self.get_drive(drive_id)
        if drive.coordinator_name != actor.name:
            logger.warning(f"{actor.name} tried to {action} drive {drive_id} held by {drive.coordinator_name}")
            raise PermissionDenied(f"Only {drive.coordinator_name} can {action} this drive")
        return drive

    @staticmethod
    def _locked_error(holder: CampusDrive) -> ConflictError:
        company_name = holder.company_name or "a company"
        return ConflictError(
            f"This date is already locked by {holder.coordinator_name} for {company_name}",
            extra={
                "locked_by": holder.coordinator_name,
                "locked_company": company_name,
                "drive_id": holder.id,
            },
        )
