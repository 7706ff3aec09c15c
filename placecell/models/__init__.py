"""
Models module - SQLAlchemy ORM tables for the portal.

Tables:
- users: coordinator/admin accounts with approval status
- companies, company_contacts: recruiting organisations and their people
- campus_drives, blocked_dates, date_requests: scheduling and approvals
- tasks: coordinator reminders
- email_templates, email_logs: outbound recruiting mail
"""

from placecell.models.accounts import User
from placecell.models.companies import Company, CompanyContact
from placecell.models.scheduling import BlockedDate, CampusDrive, DateRequest
from placecell.models.tasks import Task
from placecell.models.email import EmailLog, EmailTemplate

__all__ = [
    "User",
    "Company",
    "CompanyContact",
    "CampusDrive",
    "BlockedDate",
    "DateRequest",
    "Task",
    "EmailTemplate",
    "EmailLog",
]
