# catering/routers/email_admin.py: email settings and templates
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from catering.db import get_db
from catering.middleware.admin_auth import require_admin
from catering.models.email import EmailSetting, EmailTemplate
from catering.notify.dispatcher import prepare_test
from catering.notify.email_notify import notifier
from catering.schemas import EmailSettingIn, EmailTemplateIn, EmailTestIn
from catering.utils.enums import Trigger

logger = logging.getLogger(__name__)

router = APIRouter(tags=["email"], dependencies=[Depends(require_admin)])

TRIGGERS = {t.value for t in Trigger}


@router.get("/email-settings")
def list_settings(db: Session = Depends(get_db)):
    rows = db.query(EmailSetting).order_by(EmailSetting.trigger_name).all()
    return [{"trigger_name": s.trigger_name, "enabled": bool(s.enabled), "recipients": s.recipients or ""}
            for s in rows]


@router.put("/email-settings")
def update_settings(payload: List[EmailSettingIn], db: Session = Depends(get_db)):
    for item in payload:
        if item.trigger_name not in TRIGGERS:
            raise HTTPException(status_code=400, detail=f"Unknown trigger '{item.trigger_name}'")
    for item in payload:
        setting = db.get(EmailSetting, item.trigger_name)
        if setting is None:
            setting = EmailSetting(trigger_name=item.trigger_name)
            db.add(setting)
        setting.enabled = item.enabled
        setting.recipients = item.recipients.strip()
    db.commit()
    return {"success": True}


@router.get("/email-templates")
def list_templates(db: Session = Depends(get_db)):
    rows = db.query(EmailTemplate).order_by(EmailTemplate.trigger_name).all()
    return [
        {
            "trigger_name": t.trigger_name,
            "subject": t.subject,
            "body_html": t.body_html,
            "customer_subject": t.customer_subject or "",
            "customer_body_html": t.customer_body_html or "",
        }
        for t in rows
    ]


@router.put("/email-templates")
def update_template(payload: EmailTemplateIn, db: Session = Depends(get_db)):
    if payload.trigger_name not in TRIGGERS:
        raise HTTPException(status_code=400, detail=f"Unknown trigger '{payload.trigger_name}'")
    template = db.get(EmailTemplate, payload.trigger_name)
    if template is None:
        template = EmailTemplate(trigger_name=payload.trigger_name)
        db.add(template)
    template.subject = payload.subject
    template.body_html = payload.body_html
    template.customer_subject = payload.customer_subject
    template.customer_body_html = payload.customer_body_html
    db.commit()
    return {"success": True}


@router.post("/email-test")
def send_test(payload: EmailTestIn, db: Session = Depends(get_db)):
    to, trigger = payload.to.strip(), payload.trigger_name.strip()
    if not to or not trigger:
        raise HTTPException(status_code=400, detail="to and trigger_name are required")
    if db.get(EmailTemplate, trigger) is None:
        raise HTTPException(status_code=404, detail="Template not found")
    if not notifier.configured:
        raise HTTPException(status_code=500, detail="RESEND_API_KEY not configured")

    messages = prepare_test(db, trigger, to)
    # sent inline so the admin sees provider errors
    try:
        for message in messages:
            notifier.send(message)
    except Exception:
        logger.exception("Test email %s to %s failed", trigger, to)
        raise HTTPException(status_code=502, detail="Email provider rejected the test email")
    return {"success": True, "sent": len(messages)}
