"""Dashboard Service - headline counts for the landing page."""

from datetime import date, datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from placecell.core.auth import Actor
from placecell.models import CampusDrive, Company, DateRequest, Task
from placecell.schemas.schemas import (
    CompanyStatus, DashboardSummary, DateRequestStatus, DriveStatus, RegistrationStatus, TaskStatus
)


class DashboardService:

    def __init__(self, db: Session):
        self.db = db

    def _count(self, model, *conditions) -> int:
        return self.db.scalar(select(func.count()).select_from(model).where(*conditions)) or 0

    def summary(self, actor: Actor, today: date = None, now: datetime = None) -> DashboardSummary:
        now = now or datetime.utcnow()
        today = today or now.date()
        own_open = (Task.coordinator_name == actor.name, Task.status != TaskStatus.completed.value)
        return DashboardSummary(
            total_companies=self._count(Company),
            active_companies=self._count(Company, Company.status == CompanyStatus.active.value),
            blacklisted_companies=self._count(Company, Company.status == CompanyStatus.blacklisted.value),
            registrations_submitted=self._count(
                Company, Company.registration_status == RegistrationStatus.submitted.value
            ),
            upcoming_drives=self._count(
                CampusDrive,
                CampusDrive.status == DriveStatus.scheduled.value,
                CampusDrive.drive_date >= today,
            ),
            pending_date_requests=self._count(DateRequest, DateRequest.status == DateRequestStatus.pending.value),
            open_tasks=self._count(Task, *own_open),
            overdue_tasks=self._count(Task, *own_open, Task.due_date < now),
        )
