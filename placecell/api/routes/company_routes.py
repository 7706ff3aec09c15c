"""
Company Routes

GET    /companies - List companies (filters: status, registration_status, poc, q)
POST   /companies - Create company
GET    /companies/{id} - Get company
PUT    /companies/{id} - Partial update
DELETE /companies/{id} - Delete company (admin)
POST   /companies/{id}/blacklist - Blacklist with a reason
POST   /companies/{id}/registration-form - Upload form, AI fills job-posting fields
GET    /companies/{id}/registration-form - Latest parsed registration form

GET    /companies/{id}/contacts - List contacts, primary first
POST   /companies/{id}/contacts - Add contact
PUT    /companies/{id}/contacts/{contact_id} - Update contact
DELETE /companies/{id}/contacts/{contact_id} - Remove contact
POST   /companies/{id}/contacts/{contact_id}/primary - Make primary contact
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from placecell.core.auth import Actor, get_current_actor
from placecell.core.errors import NotFound
from placecell.db.postgres import get_db
from placecell.schemas.schemas import (
    BlacklistRequest, CompanyCreate, CompanyResponse, CompanyStatus, CompanyUpdate,
    ContactCreate, ContactResponse, ContactUpdate, JobPostingFields, MessageResponse,
    ParsedRegistrationFormResponse, RegistrationFormResponse, RegistrationStatus
)
from placecell.services.company_service import CompanyService, ContactService
from placecell.services.deepseek_client import DeepSeekClient, get_deepseek_client
from placecell.services.mongo_service import RegistrationFormStore, get_registration_store
from placecell.services.registration_service import RegistrationFormService
from placecell.utils.file_upload import extract_text_from_file

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("", response_model=List[CompanyResponse])
async def list_companies(
    status: Optional[CompanyStatus] = Query(None),
    registration_status: Optional[RegistrationStatus] = Query(None),
    poc: Optional[str] = Query(None, description="Coordinator name as first or second POC"),
    q: Optional[str] = Query(None, description="Search name or industry"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return CompanyService(db).list_companies(status, registration_status, poc, q)


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(data: CompanyCreate, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return CompanyService(db).create(actor, data)


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(company_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return CompanyService(db).get_company(company_id)


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: int,
    data: CompanyUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return CompanyService(db).update(actor, company_id, data)


@router.delete("/{company_id}", response_model=MessageResponse)
async def delete_company(company_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    CompanyService(db).delete(actor, company_id)
    return MessageResponse(message="Company deleted")


@router.post("/{company_id}/blacklist", response_model=CompanyResponse)
async def blacklist_company(
    company_id: int,
    data: BlacklistRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return CompanyService(db).blacklist(actor, company_id, data.reason)


@router.post("/{company_id}/registration-form", response_model=RegistrationFormResponse)
async def upload_registration_form(
    company_id: int,
    file: UploadFile = File(...),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
    ai_client: DeepSeekClient = Depends(get_deepseek_client),
    store: RegistrationFormStore = Depends(get_registration_store)
):
    """
    Upload a company's registration form (PDF, DOCX or TXT).

    The form text is stored in MongoDB, DeepSeek extracts the job-posting
    fields, and the company is marked Submitted.
    """
    # 404 before reading the upload
    CompanyService(db).get_company(company_id)
    form_text, filename = await extract_text_from_file(file)

    result = RegistrationFormService(db, ai_client, store).parse_and_store(
        actor, company_id, form_text, filename=filename
    )
    found = sum(1 for value in result.extracted.model_dump().values() if value)
    return RegistrationFormResponse(
        success=True,
        message=f"Registration form processed; {found} field(s) extracted",
        filename=filename,
        extracted=result.extracted,
        company=CompanyResponse.model_validate(result.company),
    )


@router.get("/{company_id}/registration-form", response_model=ParsedRegistrationFormResponse)
async def get_registration_form(
    company_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
    store: RegistrationFormStore = Depends(get_registration_store)
):
    """Most recent AI extraction stored for the company."""
    CompanyService(db).get_company(company_id)
    doc = store.latest_parsed(company_id)
    if not doc:
        raise NotFound("No registration form has been processed for this company")
    return ParsedRegistrationFormResponse(
        id=doc["_id"],
        company_id=doc["company_id"],
        raw_form_id=doc["raw_form_id"],
        fields=JobPostingFields(**doc["fields"]),
        created_at=doc["created_at"],
    )


# ------------------------------------------------------------
# Contacts
# ------------------------------------------------------------

@router.get("/{company_id}/contacts", response_model=List[ContactResponse])
async def list_contacts(company_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    CompanyService(db).get_company(company_id)
    return ContactService(db).list_contacts(company_id)


@router.post("/{company_id}/contacts", response_model=ContactResponse, status_code=201)
async def create_contact(
    company_id: int,
    data: ContactCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return ContactService(db).create(company_id, data)


@router.put("/{company_id}/contacts/{contact_id}", response_model=ContactResponse)
async def update_contact(
    company_id: int,
    contact_id: int,
    data: ContactUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return ContactService(db).update(company_id, contact_id, data)


@router.delete("/{company_id}/contacts/{contact_id}", response_model=MessageResponse)
async def delete_contact(
    company_id: int,
    contact_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    ContactService(db).delete(company_id, contact_id)
    return MessageResponse(message="Contact removed")


@router.post("/{company_id}/contacts/{contact_id}/primary", response_model=ContactResponse)
async def set_primary_contact(
    company_id: int,
    contact_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return ContactService(db).set_primary(company_id, contact_id)
