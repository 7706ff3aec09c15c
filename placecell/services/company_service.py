"""Company Service - company records, blacklisting and contacts."""

import logging
from typing import List, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from placecell.core.auth import Actor
from placecell.core.errors import NotFound, PermissionDenied, ValidationFailed, require_text
from placecell.models import CampusDrive, Company, CompanyContact, DateRequest, Task
from placecell.schemas.schemas import (
    CompanyCreate, CompanyStatus, CompanyUpdate, ContactCreate, ContactUpdate,
    JobPostingFields, RegistrationStatus
)

logger = logging.getLogger(__name__)


class CompanyService:

    def __init__(self, db: Session):
        self.db = db

    def list_companies(
        self,
        status: Optional[CompanyStatus] = None,
        registration_status: Optional[RegistrationStatus] = None,
        poc: Optional[str] = None,
        search: Optional[str] = None
    ) -> List[Company]:
        query = select(Company).order_by(Company.name)
        if status:
            query = query.where(Company.status == status.value)
        if registration_status:
            query = query.where(Company.registration_status == registration_status.value)
        if poc:
            query = query.where(or_(Company.poc_1st == poc, Company.poc_2nd == poc))
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(or_(
                func.lower(Company.name).like(pattern),
                func.lower(Company.industry).like(pattern),
            ))
        return list(self.db.scalars(query))

    def get_company(self, company_id: int) -> Company:
        company = self.db.get(Company, company_id)
        if not company:
            raise NotFound("Company not found")
        return company

    def create(self, actor: Actor, data: CompanyCreate) -> Company:
        values = data.model_dump()
        values["status"] = data.status.value
        values["registration_status"] = data.registration_status.value
        company = Company(**values)
        self.db.add(company)
        self.db.commit()
        self.db.refresh(company)
        logger.info(f"{actor.name} created company {company.name} ({company.id})")
        return company

    def update(self, actor: Actor, company_id: int, data: CompanyUpdate) -> Company:
        """Partial update; only fields present in the payload change."""
        company = self.get_company(company_id)
        updates = data.model_dump(exclude_unset=True)
        if not updates:
            raise ValidationFailed("No fields to update")

        for field in ("name", "poc_1st"):
            if field in updates:
                updates[field] = require_text(updates[field], field)
        if "poc_2nd" in updates and updates["poc_2nd"] is not None and not updates["poc_2nd"].strip():
            updates["poc_2nd"] = None

        poc_1st = updates.get("poc_1st", company.poc_1st)
        poc_2nd = updates.get("poc_2nd", company.poc_2nd)
        if poc_2nd and poc_2nd.strip() == poc_1st:
            raise ValidationFailed("Second POC must differ from first POC")

        for field, value in updates.items():
            if isinstance(value, (CompanyStatus, RegistrationStatus)):
                value = value.value
            setattr(company, field, value)
        self.db.commit()
        self.db.refresh(company)
        logger.info(f"{actor.name} updated company {company.id}: {', '.join(sorted(updates))}")
        return company

    def blacklist(self, actor: Actor, company_id: int, reason: Optional[str]) -> Company:
        """Mark Blacklisted. The reason replaces the company's notes."""
        reason = require_text(reason, "Blacklist reason")
        company = self.get_company(company_id)
        company.status = CompanyStatus.blacklisted.value
        company.notes = reason
        self.db.commit()
        self.db.refresh(company)
        logger.info(f"{actor.name} blacklisted {company.name}: {reason}")
        return company

    def apply_job_fields(self, company_id: int, fields: JobPostingFields) -> Company:
        """Write extracted job-posting fields and mark the registration form submitted."""
        company = self.get_company(company_id)
        for field, value in fields.model_dump().items():
            if value:
                setattr(company, field, value)
        company.registration_status = RegistrationStatus.submitted.value
        self.db.commit()
        self.db.refresh(company)
        return company

    def delete(self, actor: Actor, company_id: int) -> None:
        """Admin only. Removes contacts and drives; tasks and date requests lose the link."""
        if not actor.is_admin:
            raise PermissionDenied("Only admins can delete companies")
        company = self.get_company(company_id)
        self.db.execute(update(Task).where(Task.company_id == company_id).values(company_id=None))
        self.db.execute(update(DateRequest).where(DateRequest.company_id == company_id).values(company_id=None))
        for drive in self.db.scalars(select(CampusDrive).where(CampusDrive.company_id == company_id)):
            self.db.delete(drive)
        self.db.delete(company)
        self.db.commit()
        logger.info(f"{actor.name} deleted company {company_id}")


class ContactService:
    """Named people at a company. At most one of them is primary."""

    def __init__(self, db: Session):
        self.db = db

    def list_contacts(self, company_id: int) -> List[CompanyContact]:
        return list(self.db.scalars(
            select(CompanyContact)
            .where(CompanyContact.company_id == company_id)
            .order_by(CompanyContact.is_primary.desc(), CompanyContact.name)
        ))

    def get_contact(self, company_id: int, contact_id: int) -> CompanyContact:
        contact = self.db.get(CompanyContact, contact_id)
        if not contact or contact.company_id != company_id:
            raise NotFound("Contact not found")
        return contact

    def create(self, company_id: int, data: ContactCreate) -> CompanyContact:
        if not self.db.get(Company, company_id):
            raise NotFound("Company not found")
        name = require_text(data.name, "Name")
        if data.is_primary:
            self._clear_primary(company_id)
        contact = CompanyContact(
            company_id=company_id,
            name=name,
            designation=data.designation,
            phone=data.phone,
            email=data.email,
            is_primary=data.is_primary,
        )
        self.db.add(contact)
        self.db.commit()
        self.db.refresh(contact)
        return contact

    def update(self, company_id: int, contact_id: int, data: ContactUpdate) -> CompanyContact:
        contact = self.get_contact(company_id, contact_id)
        updates = data.model_dump(exclude_unset=True)
        if "name" in updates:
            updates["name"] = require_text(updates["name"], "Name")
        if updates.get("is_primary"):
            self._clear_primary(company_id)
        elif "is_primary" in updates and updates["is_primary"] is None:
            del updates["is_primary"]
        for field, value in updates.items():
            setattr(contact, field, value)
        self.db.commit()
        self.db.refresh(contact)
        return contact

    def delete(self, company_id: int, contact_id: int) -> None:
        contact = self.get_contact(company_id, contact_id)
        self.db.delete(contact)
        self.db.commit()

    def set_primary(self, company_id: int, contact_id: int) -> CompanyContact:
        """
        Make contact_id the company's only primary contact.

        Clear and set run in one transaction: if the set fails the clear is
        rolled back, so the company never ends up without its old primary.
        """
        contact = self.get_contact(company_id, contact_id)
        try:
            self._clear_primary(company_id)
            contact.is_primary = True
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(contact)
        logger.info(f"Contact {contact.id} is now primary for company {company_id}")
        return contact

    def _clear_primary(self, company_id: int) -> None:
        self.db.execute(
            update(CompanyContact)
            .where(CompanyContact.company_id == company_id, CompanyContact.is_primary.is_(True))
            .values(is_primary=False)
        )
