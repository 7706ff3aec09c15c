from datetime import datetime

import pytest

from placecell.core.config import get_settings
from placecell.core.errors import ExternalServiceError, ValidationFailed
from placecell.main import app
from placecell.models import Company
from placecell.services.deepseek_client import get_deepseek_client
from placecell.services.mongo_service import get_registration_store
from placecell.services.registration_service import validate_extracted_fields
from placecell.utils.file_upload import pdf_to_text


def test_validation_keeps_six_fields_as_text():
    fields = validate_extracted_fields({
        "job_roles": ["SDE", "Data Analyst"],
        "package_offered": "12 LPA",
        "bond_details": "N/A",
        "job_location": "  Bengaluru ",
        "selection_process": None,
        "ceo_name": "ignored",
    })
    assert fields.job_roles == "SDE, Data Analyst"
    assert fields.package_offered == "12 LPA"
    assert fields.bond_details is None
    assert fields.job_location == "Bengaluru"
    assert fields.selection_process is None
    assert fields.eligibility_criteria is None
    assert "ceo_name" not in fields.model_dump()


def test_validation_tolerates_non_dict_output():
    assert validate_extracted_fields(["not", "a", "dict"]).model_dump() == dict.fromkeys(
        ["job_roles", "package_offered", "eligibility_criteria", "bond_details", "job_location", "selection_process"]
    )


class FakeStore:
    def __init__(self):
        self.raw = []
        self.parsed = []

    def save_raw(self, company_id, form_text, filename=None, uploaded_by=None):
        self.raw.append((company_id, form_text, filename, uploaded_by))
        return f"raw-{len(self.raw)}"

    def save_parsed(self, company_id, raw_form_id, fields):
        self.parsed.append((company_id, raw_form_id, fields))
        return f"parsed-{len(self.parsed)}"

    def latest_parsed(self, company_id):
        for index in range(len(self.parsed), 0, -1):
            owner, raw_form_id, fields = self.parsed[index - 1]
            if owner == company_id:
                return {"_id": f"parsed-{index}", "company_id": owner, "raw_form_id": raw_form_id,
                        "fields": fields, "created_at": datetime(2025, 1, 15, 10, 30)}
        return None


class FakeAI:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.seen = []

    def extract_registration_fields(self, form_text):
        self.seen.append(form_text)
        if self.error:
            raise self.error
        return self.reply


@pytest.fixture
def store():
    fake = FakeStore()
    app.dependency_overrides[get_registration_store] = lambda: fake
    return fake


FORM = b"Company: Acme\nRoles: SDE\nCTC: 12 LPA\nLocation: Pune\nRounds: Aptitude, Technical, HR"


def upload(client, headers, company, content=FORM, filename="acme_form.txt"):
    return client.post(
        f"/api/companies/{company.id}/registration-form",
        files={"file": (filename, content, "text/plain")},
        headers=headers,
    )


def test_upload_fills_company_and_marks_submitted(client, db, priya, acme, store):
    ai = FakeAI(reply={"job_roles": "SDE", "package_offered": "12 LPA", "job_location": "Pune",
                       "selection_process": "Aptitude, Technical, HR", "bond_details": None})
    app.dependency_overrides[get_deepseek_client] = lambda: ai

    response = upload(client, priya, acme)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["company"]["registration_status"] == "Submitted"
    assert body["company"]["package_offered"] == "12 LPA"
    assert body["extracted"]["bond_details"] is None
    assert "Roles: SDE" in ai.seen[0]
    assert store.raw[0][0] == acme.id and store.raw[0][3] == "Priya"
    assert store.parsed[0][1] == "raw-1"


def test_ai_failure_leaves_company_unchanged(client, db, priya, acme, store):
    app.dependency_overrides[get_deepseek_client] = lambda: FakeAI(error=ExternalServiceError("AI service error: timeout"))

    response = upload(client, priya, acme)

    assert response.status_code == 502
    assert "timeout" in response.json()["detail"]
    db.expire_all()
    company = db.get(Company, acme.id)
    assert company.registration_status == "Pending"
    assert company.job_roles is None
    assert store.parsed == []


def test_unsupported_file_type(client, priya, acme, store):
    app.dependency_overrides[get_deepseek_client] = lambda: FakeAI(reply={})
    response = upload(client, priya, acme, filename="form.xlsx")
    assert response.status_code == 400
    assert store.raw == []


def test_empty_file(client, priya, acme, store):
    app.dependency_overrides[get_deepseek_client] = lambda: FakeAI(reply={})
    assert upload(client, priya, acme, content=b"   \n").status_code == 400


def test_upload_for_unknown_company(client, priya, store):
    app.dependency_overrides[get_deepseek_client] = lambda: FakeAI(reply={})
    response = client.post(
        "/api/companies/999/registration-form",
        files={"file": ("form.txt", FORM, "text/plain")},
        headers=priya,
    )
    assert response.status_code == 404


def test_latest_parsed_form_is_served(client, priya, acme, store):
    app.dependency_overrides[get_deepseek_client] = lambda: FakeAI(reply={"job_roles": "SDE"})
    assert client.get(f"/api/companies/{acme.id}/registration-form", headers=priya).status_code == 404

    upload(client, priya, acme)
    app.dependency_overrides[get_deepseek_client] = lambda: FakeAI(reply={"job_roles": "SDE, QA"})
    upload(client, priya, acme)

    response = client.get(f"/api/companies/{acme.id}/registration-form", headers=priya)
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "parsed-2"
    assert body["raw_form_id"] == "raw-2"
    assert body["fields"]["job_roles"] == "SDE, QA"
    assert body["fields"]["package_offered"] is None


def test_latest_parsed_form_for_unknown_company(client, priya, store):
    assert client.get("/api/companies/999/registration-form", headers=priya).status_code == 404


def test_malformed_pdf_is_a_validation_error():
    with pytest.raises(ValidationFailed):
        pdf_to_text(b"%PDF-1.4\n1 0 obj << /Type /Catalog /Pages 9 0 R >> endobj\ntrailer << /Root 1 0 R >>\n%%EOF")


def test_broken_pdf_upload_is_rejected(client, priya, acme, store):
    app.dependency_overrides[get_deepseek_client] = lambda: FakeAI(reply={})
    response = upload(client, priya, acme, content=b"%PDF-1.4 truncated", filename="form.pdf")
    assert response.status_code == 400
    assert store.raw == []


def test_oversized_upload(client, priya, acme, store, monkeypatch):
    app.dependency_overrides[get_deepseek_client] = lambda: FakeAI(reply={})
    monkeypatch.setattr(get_settings(), "upload_max_mb", 1)
    response = upload(client, priya, acme, content=b"x" * (1024 * 1024 + 1))
    assert response.status_code == 413
    assert store.raw == []
