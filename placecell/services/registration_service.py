"""
Registration Form Service - company registration forms read by DeepSeek.

Pipeline:
1. Store raw form text in MongoDB
2. Extract the job-posting fields with the AI client
3. Validate the output into optional strings
4. Store the parsed fields in MongoDB
5. Write non-empty fields onto the company and mark the form Submitted

If the AI call fails the company row is left untouched.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from placecell.core.auth import Actor
from placecell.models import Company
from placecell.schemas.schemas import JobPostingFields
from placecell.services.company_service import CompanyService
from placecell.services.deepseek_client import REGISTRATION_FIELDS, DeepSeekClient
from placecell.services.mongo_service import RegistrationFormStore

logger = logging.getLogger(__name__)

_EMPTY_MARKERS = {"", "null", "none", "n/a", "na", "not mentioned", "not specified", "-"}


def _as_text(value):
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        parts = [str(v).strip() for v in value if v is not None and str(v).strip()]
        value = ", ".join(parts)
    elif isinstance(value, dict):
        value = "; ".join(f"{k}: {v}" for k, v in value.items() if v)
    text = str(value).strip()
    if text.lower() in _EMPTY_MARKERS:
        return None
    return text


def validate_extracted_fields(data) -> JobPostingFields:
    """
    Sanitize AI output into the six job-posting fields.
    Unknown keys are dropped; lists are joined; placeholders like "N/A" become None.
    """
    if not isinstance(data, dict):
        return JobPostingFields()
    return JobPostingFields(**{field: _as_text(data.get(field)) for field in REGISTRATION_FIELDS})


@dataclass
class RegistrationResult:
    company: Company
    extracted: JobPostingFields
    raw_form_id: str
    parsed_form_id: str


class RegistrationFormService:

    def __init__(self, db: Session, ai_client: DeepSeekClient, store: RegistrationFormStore):
        self.db = db
        self.ai_client = ai_client
        self.store = store
        self.companies = CompanyService(db)

    def parse_and_store(self, actor: Actor, company_id: int, form_text: str, filename: str = None) -> RegistrationResult:
        company = self.companies.get_company(company_id)

        raw_id = self.store.save_raw(company.id, form_text, filename=filename, uploaded_by=actor.name)

        # Raises ExternalServiceError before anything touches the company
        extracted = validate_extracted_fields(self.ai_client.extract_registration_fields(form_text))

        parsed_id = self.store.save_parsed(company.id, raw_id, extracted.model_dump())
        company = self.companies.apply_job_fields(company.id, extracted)

        found = [name for name, value in extracted.model_dump().items() if value]
        logger.info(
            f"{actor.name} uploaded registration form for {company.name}; "
            f"extracted {len(found)} field(s): {', '.join(found) or 'none'}"
        )
        return RegistrationResult(
            company=company,
            extracted=extracted,
            raw_form_id=raw_id,
            parsed_form_id=parsed_id,
        )
