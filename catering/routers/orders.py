# catering/routers/orders.py
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from catering.db import get_db
from catering.errors import CateringError
from catering.middleware.admin_auth import require_admin
from catering.models.order import Order
from catering.models.order_note import OrderNote
from catering.notify.dispatcher import dispatch
from catering.schemas import CreateOrderIn, DeliveryFeeIn, NoteIn, UpdateOrderIn
from catering.services import delivery_fee, production
from catering.services.orders import create_order, order_to_dict
from catering.services.status import apply_update, set_delivery_fee
from catering.utils.enums import NoteType, Trigger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

NOTE_TYPES = {t.value for t in NoteType}


def get_order_or_404(db: Session, order_id: int) -> Order:
    order = db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def _note_dict(n: OrderNote) -> dict:
    return {
        "id": n.id,
        "order_id": n.order_id,
        "note_type": n.note_type,
        "content": n.content,
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }


# ---------- PUBLIC ----------
@router.post("", status_code=201)
def submit_order(payload: CreateOrderIn, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    try:
        order = create_order(db, payload)
    except CateringError as e:
        raise HTTPException(status_code=400, detail=str(e))

    dispatch(background_tasks, db, Trigger.NEW_ORDER.value, order)
    return {"id": order.id, "status": order.status}


# ---------- ADMIN ----------
@router.get("")
def list_orders(
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    admin: str = Depends(require_admin),
):
    q = db.query(Order).order_by(Order.created_at.desc(), Order.id.desc())
    if status and status != "all":
        q = q.filter(Order.status == status)
    return [order_to_dict(o) for o in q.all()]


@router.delete("")
def delete_all_orders(db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    """Wipe every order and its notes (clears test data)."""
    notes = db.query(OrderNote).delete(synchronize_session=False)
    orders = db.query(Order).delete(synchronize_session=False)
    db.commit()
    logger.warning("All orders deleted by %s (%d orders, %d notes)", admin, orders, notes)
    return {"deleted": orders}


@router.get("/{order_id}")
def get_order(order_id: int, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    return order_to_dict(get_order_or_404(db, order_id))


@router.patch("/{order_id}")
def update_order(
    order_id: int,
    patch: UpdateOrderIn,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    admin: str = Depends(require_admin),
):
    order = get_order_or_404(db, order_id)
    try:
        result = apply_update(db, order, patch, user=admin)
    except CateringError as e:
        raise HTTPException(status_code=400, detail=str(e))

    for trigger in result.triggers:
        sheet = None
        if trigger == Trigger.ORDER_PAID.value:
            sheet = production.production_sheet_html(production.paid_orders(db))
        dispatch(background_tasks, db, trigger, order, production_sheet=sheet)

    return order_to_dict(order)


@router.post("/{order_id}/delivery-fee")
def quote_delivery_fee(
    order_id: int,
    payload: DeliveryFeeIn,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    admin: str = Depends(require_admin),
):
    order = get_order_or_404(db, order_id)
    fee = delivery_fee.quote(
        order.subtotal,
        payload.miles,
        payload.gas_price,
        setup_required=payload.setup_required,
        wait_minutes=payload.wait_minutes,
    )
    response = {"order_id": order.id, "subtotal": order.subtotal, "quote": fee.to_dict(), "applied": False}

    if payload.apply:
        set_delivery_fee(order, fee.total_cents)
        db.commit()
        db.refresh(order)
        logger.info("Order #%s delivery fee set to %s by %s", order.id, fee.total, admin)
        dispatch(background_tasks, db, Trigger.DELIVERY_FEE_CONFIRMED.value, order)
        response.update(applied=True, total_price=order.total_price, delivery_fee=order.delivery_fee)
    return response


# ---------- NOTES ----------
@router.get("/{order_id}/notes")
def list_notes(order_id: int, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    order = get_order_or_404(db, order_id)
    return [_note_dict(n) for n in order.notes]


@router.post("/{order_id}/notes", status_code=201)
def add_note(
    order_id: int,
    payload: NoteIn,
    db: Session = Depends(get_db),
    admin: str = Depends(require_admin),
):
    if not payload.note_type.strip() or not payload.content.strip():
        raise HTTPException(status_code=400, detail="note_type and content are required")
    if payload.note_type not in NOTE_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown note_type '{payload.note_type}'")
    order = get_order_or_404(db, order_id)

    note = OrderNote(order_id=order.id, note_type=payload.note_type, content=payload.content.strip())
    db.add(note)
    db.commit()
    db.refresh(note)
    return _note_dict(note)
