# catering/routers/faqs.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from catering.db import get_db
from catering.middleware.admin_auth import require_admin
from catering.models.catalog import Faq
from catering.schemas import FaqIn

router = APIRouter(prefix="/faqs", tags=["faqs"])


def faq_dict(f: Faq) -> dict:
    return {"id": f.id, "question": f.question, "answer": f.answer, "display_order": f.display_order}


@router.get("")
def list_faqs(db: Session = Depends(get_db)):
    return [faq_dict(f) for f in db.query(Faq).order_by(Faq.display_order, Faq.id).all()]


@router.post("", status_code=201)
def create_faq(payload: FaqIn, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    order = payload.display_order
    if order is None:
        order = (db.query(func.max(Faq.display_order)).scalar() or 0) + 1
    faq = Faq(question=payload.question, answer=payload.answer, display_order=order)
    db.add(faq)
    db.commit()
    db.refresh(faq)
    return faq_dict(faq)


@router.put("/{faq_id}")
def update_faq(faq_id: int, payload: FaqIn, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    faq = db.get(Faq, faq_id)
    if not faq:
        raise HTTPException(status_code=404, detail="FAQ not found")
    faq.question = payload.question
    faq.answer = payload.answer
    if payload.display_order is not None:
        faq.display_order = payload.display_order
    db.commit()
    db.refresh(faq)
    return faq_dict(faq)


@router.delete("/{faq_id}")
def delete_faq(faq_id: int, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    faq = db.get(Faq, faq_id)
    if not faq:
        raise HTTPException(status_code=404, detail="FAQ not found")
    db.delete(faq)
    db.commit()
    return {"deleted": faq_id}
