# catering/services/status.py
"""
Order status state machine and admin field patches.

    pending -> approved -> paid -> completed
    pending -> rejected

No back-edges; rejected and completed are terminal. Updates are not
versioned: two admins saving the same order race and the last write wins.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set

from sqlalchemy.orm import Session

from catering.errors import InvalidTransitionError
from catering.models.order import Order
from catering.models.order_note import OrderNote
from catering.schemas import UpdateOrderIn
from catering.utils.enums import NoteType, OrderStatus, Trigger

logger = logging.getLogger(__name__)

S = OrderStatus

ALLOWED_TRANSITIONS: Dict[str, Set[str]] = {
    S.PENDING.value: {S.APPROVED.value, S.REJECTED.value},
    S.APPROVED.value: {S.PAID.value},
    S.PAID.value: {S.COMPLETED.value},
    S.REJECTED.value: set(),
    S.COMPLETED.value: set(),
}

# status reached -> notification trigger
STATUS_TRIGGERS: Dict[str, str] = {
    S.APPROVED.value: Trigger.ORDER_APPROVED.value,
    S.REJECTED.value: Trigger.ORDER_REJECTED.value,
    S.PAID.value: Trigger.ORDER_PAID.value,
    S.COMPLETED.value: Trigger.ORDER_COMPLETED.value,
}


def can_transition(current: str, requested: str) -> bool:
    return requested in ALLOWED_TRANSITIONS.get(current, set())


def check_transition(current: str, requested: str) -> None:
    if not can_transition(current, requested):
        raise InvalidTransitionError(current, requested)


def transition(db: Session, order: Order, new_status: str, reason: Optional[str] = None,
               user: str = "admin") -> str:
    """Move the order to new_status (not committed). Returns the old status."""
    old = order.status
    check_transition(old, new_status)

    order.status = new_status
    if reason is not None:
        order.rejection_reason = reason

    content = f"Status changed from {old} to {new_status} by {user}"
    if reason:
        content += f": {reason}"
    db.add(OrderNote(order_id=order.id, note_type=NoteType.STATUS_CHANGE.value, content=content))
    logger.info("Order #%s: %s -> %s", order.id, old, new_status)
    return old


@dataclass
class UpdateResult:
    triggers: List[str] = field(default_factory=list)
    new_status: Optional[str] = None


def apply_update(db: Session, order: Order, patch: UpdateOrderIn, user: str = "admin") -> UpdateResult:
    """
    Apply an admin PATCH and commit. An illegal status raises before anything
    is touched, so the stored order stays as it was.
    """
    if patch.status is not None:
        check_transition(order.status, patch.status)

    result = UpdateResult()

    if patch.rejection_reason is not None:
        order.rejection_reason = patch.rejection_reason
    if patch.courier_status is not None:
        order.courier_status = patch.courier_status
    if patch.courier_notes is not None:
        order.courier_notes = patch.courier_notes
    if patch.kitchen_notified is not None:
        order.kitchen_notified = patch.kitchen_notified
    if patch.production_done is not None:
        order.production_done = patch.production_done
        order.production_done_at = datetime.utcnow() if patch.production_done else None
        if patch.production_done:
            result.triggers.append(Trigger.PRODUCTION_DONE.value)

    if patch.delivery_fee is not None:
        set_delivery_fee(order, patch.delivery_fee)
        result.triggers.append(Trigger.DELIVERY_FEE_CONFIRMED.value)

    if patch.status is not None:
        reason = patch.rejection_reason if patch.status == S.REJECTED.value else None
        transition(db, order, patch.status, reason=reason, user=user)
        result.new_status = patch.status
        result.triggers.append(STATUS_TRIGGERS[patch.status])

    db.commit()
    db.refresh(order)
    return result


def set_delivery_fee(order: Order, fee_cents: int) -> None:
    # swap the old fee for the new one, safe to repeat
    order.total_price = order.subtotal + int(fee_cents)
    order.delivery_fee = int(fee_cents)
