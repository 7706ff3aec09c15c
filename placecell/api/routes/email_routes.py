"""
Email Routes

GET    /emails/templates - List templates
POST   /emails/templates - Create template
GET    /emails/templates/{id} - Get template
PUT    /emails/templates/{id} - Update template
DELETE /emails/templates/{id} - Delete template
POST   /emails/preview - Render a template for a company without sending
POST   /emails/send - Render and send to the company's HR email
GET    /emails/logs - Sent email history, newest first
POST   /emails/generate - AI-drafted subject and body
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from placecell.core.auth import Actor, get_current_actor
from placecell.db.postgres import get_db
from placecell.schemas.schemas import (
    EmailComposeRequest, EmailDraftResponse, EmailGenerateRequest, EmailLogResponse,
    EmailPreviewResponse, EmailTemplateCreate, EmailTemplateResponse, EmailTemplateUpdate, MessageResponse
)
from placecell.services.deepseek_client import DeepSeekClient, get_deepseek_client
from placecell.services.email_service import EmailService, SmtpEmailSender, get_email_sender

router = APIRouter(prefix="/emails", tags=["Email"])


@router.get("/templates", response_model=List[EmailTemplateResponse])
async def list_templates(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return EmailService(db).list_templates()


@router.post("/templates", response_model=EmailTemplateResponse, status_code=201)
async def create_template(
    data: EmailTemplateCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return EmailService(db).create_template(actor, data)


@router.get("/templates/{template_id}", response_model=EmailTemplateResponse)
async def get_template(template_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return EmailService(db).get_template(template_id)


@router.put("/templates/{template_id}", response_model=EmailTemplateResponse)
async def update_template(
    template_id: int,
    data: EmailTemplateUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return EmailService(db).update_template(actor, template_id, data)


@router.delete("/templates/{template_id}", response_model=MessageResponse)
async def delete_template(template_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    EmailService(db).delete_template(actor, template_id)
    return MessageResponse(message="Template deleted")


@router.post("/preview", response_model=EmailPreviewResponse)
async def preview_email(
    data: EmailComposeRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    to, subject, body = EmailService(db).preview(data)
    return EmailPreviewResponse(to=to, subject=subject, body=body)


@router.post("/send", response_model=EmailLogResponse, status_code=201)
async def send_email(
    data: EmailComposeRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
    sender: SmtpEmailSender = Depends(get_email_sender)
):
    return EmailService(db).send(actor, data, sender)


@router.get("/logs", response_model=List[EmailLogResponse])
async def list_logs(
    limit: int = Query(100, ge=1, le=500),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return EmailService(db).list_logs(limit)


@router.post("/generate", response_model=EmailDraftResponse)
async def generate_email(
    data: EmailGenerateRequest,
    actor: Actor = Depends(get_current_actor),
    ai_client: DeepSeekClient = Depends(get_deepseek_client)
):
    """Draft an email with DeepSeek. Nothing is sent or stored."""
    draft = ai_client.generate_email(data.company_name, hr_name=data.hr_name, purpose=data.purpose)
    return EmailDraftResponse(**draft)
