from types import SimpleNamespace

import pytest

from placecell.core.errors import ExternalServiceError, ValidationFailed
from placecell.main import app
from placecell.services.deepseek_client import DeepSeekClient, get_deepseek_client
from placecell.services.email_service import get_email_sender, render_template, to_html

INVITE = SimpleNamespace(
    subject="Campus drive invitation for {{company_name}}",
    body="Dear {{hr_name}},\n\nWe would like to host {{company_name}} on {{drive_month}}.\n{{signature}}",
    placeholders=[
        {"key": "company_name", "label": "Company", "default": None, "required": True},
        {"key": "hr_name", "label": "HR Name", "default": None, "required": False},
        {"key": "drive_month", "label": "Drive Month", "default": None, "required": True},
        {"key": "signature", "label": "Signature", "default": "Placement Cell", "required": False},
    ],
)


def company(name="Acme", hr_name=None):
    return SimpleNamespace(name=name, hr_name=hr_name)


def test_render_fills_company_defaults():
    subject, body = render_template(INVITE, company(hr_name="Asha Rao"), {"drive_month": "March"})
    assert subject == "Campus drive invitation for Acme"
    assert body.startswith("Dear Asha Rao,")
    assert "host Acme on March." in body
    assert body.endswith("Placement Cell")


def test_hr_name_falls_back_to_greeting():
    _, body = render_template(INVITE, company(), {"drive_month": "March"})
    assert body.startswith("Dear Hi Team,")


def test_given_values_win_over_defaults():
    _, body = render_template(INVITE, company(hr_name="Asha Rao"),
                              {"drive_month": "March", "hr_name": "Ms. Rao", "signature": "T&P Office"})
    assert body.startswith("Dear Ms. Rao,")
    assert body.endswith("T&P Office")


def test_missing_required_values_are_named():
    with pytest.raises(ValidationFailed) as excinfo:
        render_template(INVITE, company(), {"drive_month": "  "})
    assert "Drive Month" in excinfo.value.detail


def test_unknown_placeholders_stay_verbatim():
    template = SimpleNamespace(subject="Hello {{company_name}}", body="Ref {{ticket_no}}", placeholders=[])
    subject, body = render_template(template, company(), {})
    assert subject == "Hello {{company_name}}"
    assert body == "Ref {{ticket_no}}"


def test_html_part_keeps_line_breaks():
    assert to_html("Hi <team>\nThanks") == "Hi &lt;team&gt;<br>Thanks"


class FakeSender:
    def __init__(self):
        self.sent = []

    def send(self, to, subject, body):
        self.sent.append((to, subject, body))


class FailingSender:
    def send(self, to, subject, body):
        raise ExternalServiceError("Failed to send email: connection refused")


@pytest.fixture
def template_id(client, priya):
    payload = {
        "name": "Drive invitation",
        "subject": INVITE.subject,
        "body": INVITE.body,
        "placeholders": INVITE.placeholders,
    }
    response = client.post("/api/emails/templates", json=payload, headers=priya)
    assert response.status_code == 201
    return response.json()["id"]


def test_template_placeholder_keys_are_checked(client, priya):
    bad = {"name": "x", "subject": "s", "body": "b", "placeholders": [{"key": "HR Name", "label": "HR"}]}
    assert client.post("/api/emails/templates", json=bad, headers=priya).status_code == 422

    dup = {"name": "x", "subject": "s", "body": "b",
           "placeholders": [{"key": "a", "label": "A"}, {"key": "a", "label": "B"}]}
    assert client.post("/api/emails/templates", json=dup, headers=priya).status_code == 400


def test_preview(client, priya, acme, template_id):
    response = client.post(
        "/api/emails/preview",
        json={"company_id": acme.id, "template_id": template_id, "values": {"drive_month": "March"}},
        headers=priya,
    )
    assert response.status_code == 200
    assert response.json()["to"] == "hr@acme.com"
    assert response.json()["subject"] == "Campus drive invitation for Acme"


def test_send_logs_delivery(client, priya, acme, template_id):
    sender = FakeSender()
    app.dependency_overrides[get_email_sender] = lambda: sender

    response = client.post(
        "/api/emails/send",
        json={"company_id": acme.id, "template_id": template_id, "values": {"drive_month": "March"}},
        headers=priya,
    )

    assert response.status_code == 201
    assert sender.sent[0][0] == "hr@acme.com"
    log = response.json()
    assert log["status"] == "sent"
    assert log["company_name"] == "Acme"
    assert log["sent_at"] is not None

    logs = client.get("/api/emails/logs", headers=priya).json()
    assert [entry["recipient_email"] for entry in logs] == ["hr@acme.com"]


def test_failed_send_is_not_logged(client, priya, acme, template_id):
    app.dependency_overrides[get_email_sender] = lambda: FailingSender()

    response = client.post(
        "/api/emails/send",
        json={"company_id": acme.id, "template_id": template_id, "values": {"drive_month": "March"}},
        headers=priya,
    )

    assert response.status_code == 502
    assert "connection refused" in response.json()["detail"]
    assert client.get("/api/emails/logs", headers=priya).json() == []


def test_send_needs_hr_email(client, priya, globex, template_id):
    sender = FakeSender()
    app.dependency_overrides[get_email_sender] = lambda: sender

    response = client.post(
        "/api/emails/send",
        json={"company_id": globex.id, "template_id": template_id, "values": {"drive_month": "March"}},
        headers=priya,
    )
    assert response.status_code == 400
    assert sender.sent == []


def test_missing_required_value_blocks_send(client, priya, acme, template_id):
    sender = FakeSender()
    app.dependency_overrides[get_email_sender] = lambda: sender

    response = client.post("/api/emails/send", json={"company_id": acme.id, "template_id": template_id},
                           headers=priya)
    assert response.status_code == 400
    assert response.json()["missing"] == ["Drive Month"]
    assert sender.sent == []


def stub_ai(reply):
    ai = DeepSeekClient.__new__(DeepSeekClient)
    ai._call_api = lambda *args, **kwargs: reply
    return ai


def test_generate_uses_model_json(client, priya):
    ai = stub_ai('```json\n{"subject": "Invitation", "body": "Dear Asha"}\n```')
    app.dependency_overrides[get_deepseek_client] = lambda: ai

    response = client.post("/api/emails/generate", json={"company_name": "Acme", "hr_name": "Asha"}, headers=priya)
    assert response.json() == {"subject": "Invitation", "body": "Dear Asha"}


def test_generate_falls_back_to_raw_text(client, priya):
    app.dependency_overrides[get_deepseek_client] = lambda: stub_ai("Dear team, please visit us.")

    response = client.post("/api/emails/generate", json={"company_name": "Acme"}, headers=priya)
    assert response.json() == {
        "subject": "Campus Recruitment Invitation - Acme",
        "body": "Dear team, please visit us.",
    }
