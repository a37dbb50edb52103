# catering/routers/customers.py: customer list and SMS pre-order export log
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from catering.db import get_db
from catering.middleware.admin_auth import require_admin
from catering.models.order import Order
from catering.models.preorder_export import PreorderExport
from catering.schemas import ExportIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("")
def list_customers(db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    """One row per customer email, newest customer first."""
    last_order = func.max(Order.created_at).label("last_order_date")
    rows = (
        db.query(
            Order.customer_email,
            func.max(Order.customer_name),
            func.max(Order.customer_phone),
            func.max(Order.sms_opt_in),
            func.max(Order.email_opt_in),
            func.count(Order.id),
            last_order,
            func.min(Order.created_at),
        )
        .group_by(Order.customer_email)
        .order_by(last_order.desc())
        .all()
    )
    return [
        {
            "email": email,
            "name": name,
            "phone": phone,
            "sms_opt_in": bool(sms),
            "email_opt_in": bool(mail),
            "order_count": count,
            "last_order_date": last.isoformat() if last else None,
            "first_order_date": first.isoformat() if first else None,
        }
        for email, name, phone, sms, mail, count, last, first in rows
    ]


@router.get("/export")
def list_exports(db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    rows = db.query(PreorderExport).order_by(PreorderExport.exported_at.desc(), PreorderExport.id.desc()).all()
    return [
        {
            "id": r.id,
            "exported_at": r.exported_at.isoformat(),
            "phone_numbers": r.phone_numbers,
            "customer_count": r.customer_count,
            "notes": r.notes,
        }
        for r in rows
    ]


@router.post("/export", status_code=201)
def record_export(payload: ExportIn, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    phones = [p.strip() for p in payload.phone_numbers if p and p.strip()]
    if not phones:
        raise HTTPException(status_code=400, detail="phone_numbers array is required")

    export = PreorderExport(phone_numbers=phones, customer_count=len(phones), notes=payload.notes or None)
    db.add(export)
    db.commit()
    db.refresh(export)
    logger.info("Pre-order export #%s recorded (%d numbers)", export.id, len(phones))
    return {"id": export.id, "exported_at": export.exported_at.isoformat(), "customer_count": export.customer_count}
