"""
Email Service - outreach templates, rendering, SMTP delivery and history.

Templates use {{key}} placeholders. A few keys are filled from the company
when the sender leaves them blank:

    company_name -> company name
    hr_name      -> company HR name, else the placeholder default, else "Hi Team"

Anything still unresolved after defaults is left in the text as-is.
"""

import html
import logging
import re
import smtplib
import ssl
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from placecell.core.auth import Actor
from placecell.core.config import get_settings
from placecell.core.errors import ExternalServiceError, NotFound, ValidationFailed
from placecell.models import Company, EmailLog, EmailTemplate
from placecell.schemas.schemas import EmailComposeRequest, EmailTemplateCreate, EmailTemplateUpdate

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([a-z0-9_]+)\s*\}\}")
DEFAULT_GREETING_NAME = "Hi Team"


def _as_dict(placeholder) -> dict:
    if isinstance(placeholder, dict):
        return placeholder
    return placeholder.model_dump()


def resolve_values(placeholders, company: Optional[Company], values: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """
    Work out the value of every placeholder.

    Raises ValidationFailed naming the labels of required placeholders that
    end up without a value.
    """
    given = {k: v for k, v in (values or {}).items() if v is not None and str(v).strip()}
    resolved = dict(given)
    missing = []

    for placeholder in map(_as_dict, placeholders or []):
        key = placeholder["key"]
        default = placeholder.get("default")
        if key in given:
            continue
        if key == "company_name" and company is not None:
            value = company.name
        elif key == "hr_name":
            value = (company.hr_name if company is not None else None) or default or DEFAULT_GREETING_NAME
        else:
            value = default

        if value is not None and str(value).strip():
            resolved[key] = str(value)
        elif placeholder.get("required"):
            missing.append(placeholder.get("label") or key)

    if missing:
        raise ValidationFailed(
            f"Missing required fields: {', '.join(missing)}",
            extra={"missing": missing},
        )
    return resolved


def fill_placeholders(text: str, resolved: Dict[str, str]) -> str:
    """Replace every {{key}} that has a value; leave the rest untouched."""
    return PLACEHOLDER_PATTERN.sub(lambda m: resolved.get(m.group(1), m.group(0)), text)


def render_template(template, company: Optional[Company], values: Optional[Dict[str, str]] = None) -> Tuple[str, str]:
    """Returns (subject, body) for the template filled in for company."""
    resolved = resolve_values(template.placeholders, company, values)
    return fill_placeholders(template.subject, resolved), fill_placeholders(template.body, resolved)


def to_html(body: str) -> str:
    return html.escape(body).replace("\r\n", "\n").replace("\n", "<br>")


class SmtpEmailSender:
    """Sends one message per call over SMTP (SSL on 465, STARTTLS otherwise)."""

    def __init__(self, host: str, port: int, username: str, password: str, sender_name: str):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender_name = sender_name

    def send(self, to: str, subject: str, body: str) -> None:
        if not self.username or not self.password:
            raise ExternalServiceError("Email sending is not configured")

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr((self.sender_name, self.username))
        msg["To"] = to
        msg.attach(MIMEText(body, "plain"))
        msg.attach(MIMEText(to_html(body), "html"))

        context = ssl.create_default_context()
        try:
            if self.port == 465:
                server = smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=15)
            else:
                server = smtplib.SMTP(self.host, self.port, timeout=15)
                server.starttls(context=context)
            with server:
                server.login(self.username, self.password)
                server.sendmail(self.username, [to], msg.as_string())
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP auth error: {e}")
            raise ExternalServiceError("Email server rejected the login")
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP error sending to {to}: {e}")
            raise ExternalServiceError(f"Failed to send email: {e}")


def get_email_sender() -> SmtpEmailSender:
    settings = get_settings()
    return SmtpEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        sender_name=settings.smtp_sender_name,
    )


class EmailService:

    def __init__(self, db: Session):
        self.db = db

    # Templates

    def list_templates(self) -> List[EmailTemplate]:
        return list(self.db.scalars(select(EmailTemplate).order_by(EmailTemplate.name)))

    def get_template(self, template_id: int) -> EmailTemplate:
        template = self.db.get(EmailTemplate, template_id)
        if not template:
            raise NotFound("Email template not found")
        return template

    def create_template(self, actor: Actor, data: EmailTemplateCreate) -> EmailTemplate:
        self._check_unique_keys(data.placeholders)
        template = EmailTemplate(
            name=data.name.strip(),
            subject=data.subject,
            body=data.body,
            placeholders=[p.model_dump() for p in data.placeholders],
        )
        self.db.add(template)
        self.db.commit()
        self.db.refresh(template)
        logger.info(f"{actor.name} created email template '{template.name}'")
        return template

    def update_template(self, actor: Actor, template_id: int, data: EmailTemplateUpdate) -> EmailTemplate:
        template = self.get_template(template_id)
        updates = data.model_dump(exclude_unset=True, exclude={"placeholders"})
        for field, value in updates.items():
            if value is not None:
                setattr(template, field, value)
        if data.placeholders is not None:
            self._check_unique_keys(data.placeholders)
            template.placeholders = [p.model_dump() for p in data.placeholders]
        self.db.commit()
        self.db.refresh(template)
        return template

    def delete_template(self, actor: Actor, template_id: int) -> None:
        template = self.get_template(template_id)
        self.db.delete(template)
        self.db.commit()
        logger.info(f"{actor.name} deleted email template {template_id}")

    # Compose / send

    def preview(self, data: EmailComposeRequest) -> Tuple[Optional[str], str, str]:
        company = self._company(data.company_id)
        subject, body = render_template(self.get_template(data.template_id), company, data.values)
        return company.hr_email, subject, body

    def send(self, actor: Actor, data: EmailComposeRequest, sender: SmtpEmailSender) -> EmailLog:
        """Render and deliver; only a successful delivery is logged."""
        company = self._company(data.company_id)
        if not company.hr_email:
            raise ValidationFailed(f"{company.name} has no HR email address")
        template = self.get_template(data.template_id)
        subject, body = render_template(template, company, data.values)

        sender.send(company.hr_email, subject, body)

        entry = EmailLog(
            template_id=template.id,
            company_name=company.name,
            recipient_email=company.hr_email,
            subject=subject,
            body=body,
            status="sent",
            sent_at=datetime.utcnow(),
        )
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        logger.info(f"{actor.name} emailed {company.hr_email} ({company.name}): {subject}")
        return entry

    def list_logs(self, limit: int = 100) -> List[EmailLog]:
        return list(self.db.scalars(
            select(EmailLog).order_by(EmailLog.created_at.desc(), EmailLog.id.desc()).limit(limit)
        ))

    def _company(self, company_id: int) -> Company:
        company = self.db.get(Company, company_id)
        if not company:
            raise NotFound("Company not found")
        return company

    @staticmethod
    def _check_unique_keys(placeholders) -> None:
        keys = [p.key for p in placeholders]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            raise ValidationFailed(f"Duplicate placeholder keys: {', '.join(duplicates)}")
