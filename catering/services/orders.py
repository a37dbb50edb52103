# catering/services/orders.py
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from catering.errors import OrderValidationError
from catering.models.catalog import Flavor
from catering.models.order import Order
from catering.models.order_note import OrderNote
from catering.schemas import CreateOrderIn, OrderData
from catering.utils.enums import BoxType, FulfillmentType, NoteType, OrderStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoxSpec:
    label: str
    pieces: int
    max_flavors: int
    price_cents: int


BOX_SPECS = {
    BoxType.PARTY_BOX.value: BoxSpec("Party Box", pieces=40, max_flavors=3, price_cents=22500),
    BoxType.BIG_BOX.value: BoxSpec("Big Box", pieces=8, max_flavors=4, price_cents=7800),
}

MIN_LEAD_DAYS = 3            # 72 hours, counted from the start of today
BAKE_LEAD = timedelta(minutes=45)
CLOSED_WEEKDAYS = {0, 1}     # Mon, Tue: accepted as inquiries only

_TIME_RE = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?\s*([AaPp]\.?[Mm]\.?)?\s*$")


# ---------- DATES & TIMES ----------
def parse_time(value: str) -> time:
    """Parse "2:00 PM", "2 pm", "12:30AM" or "14:00"."""
    m = _TIME_RE.match(value or "")
    if not m:
        raise OrderValidationError(f"Invalid time: {value!r}")
    hours = int(m.group(1))
    minutes = int(m.group(2) or 0)
    meridiem = (m.group(3) or "").replace(".", "").upper()
    if meridiem:
        if not 1 <= hours <= 12:
            raise OrderValidationError(f"Invalid time: {value!r}")
        if meridiem == "PM" and hours != 12:
            hours += 12
        elif meridiem == "AM" and hours == 12:
            hours = 0
    if hours > 23 or minutes > 59:
        raise OrderValidationError(f"Invalid time: {value!r}")
    return time(hours, minutes)


def min_fulfillment_date(today: Optional[date] = None) -> date:
    return (today or date.today()) + timedelta(days=MIN_LEAD_DAYS)


def production_deadline(fulfillment_date: date) -> date:
    return fulfillment_date - timedelta(days=1)


def bake_deadline(fulfillment_date: date, window_start: str) -> datetime:
    return datetime.combine(fulfillment_date, parse_time(window_start)) - BAKE_LEAD


def is_closed_day(d: date) -> bool:
    return d.weekday() in CLOSED_WEEKDAYS


# ---------- ORDER DATA ----------
def validate_items(order_data: OrderData, flavor_names: Iterable[str]) -> None:
    if not order_data.items:
        raise OrderValidationError("Order must contain at least one box")

    known = set(flavor_names)
    for item in order_data.items:
        box = BOX_SPECS.get(item.type)
        if box is None:
            raise OrderValidationError(f"Unknown box type: {item.type!r}")

        if not 1 <= len(item.flavors) <= box.max_flavors:
            raise OrderValidationError(
                f"{box.label} must have 1-{box.max_flavors} flavors selected"
            )

        pieces = sum(f.quantity for f in item.flavors)
        if pieces != box.pieces:
            raise OrderValidationError(
                f"{box.label} must have exactly {box.pieces} pieces total"
            )

        for f in item.flavors:
            if f.name not in known:
                raise OrderValidationError(f'Flavor "{f.name}" does not exist')


def with_default_prices(order_data: OrderData) -> OrderData:
    items = [
        item.model_copy(update={"price_cents": BOX_SPECS[item.type].price_cents})
        if item.price_cents is None else item
        for item in order_data.items
    ]
    return order_data.model_copy(update={"items": items})


def items_total(order_data: OrderData) -> int:
    total = 0
    for item in order_data.items:
        unit = item.price_cents if item.price_cents is not None else BOX_SPECS[item.type].price_cents
        total += unit * item.quantity
    for addon in order_data.addons:
        total += addon.price_cents * addon.quantity
    return total


def total_price(order_data: OrderData, delivery_fee: int = 0) -> int:
    return items_total(order_data) + int(delivery_fee or 0)


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def validate_order(payload: CreateOrderIn, flavor_names: Iterable[str],
                   today: Optional[date] = None) -> dict:
    """
    Check a customer submission and return the column values of the new order.

    Raises OrderValidationError with a customer readable message on the
    first problem found.
    """
    if _blank(payload.customer_name) or _blank(payload.customer_email) or _blank(payload.customer_phone):
        raise OrderValidationError("customer_name, customer_email, and customer_phone are required")

    kind = payload.fulfillment_type
    if kind not in (FulfillmentType.PICKUP.value, FulfillmentType.DELIVERY.value):
        raise OrderValidationError("fulfillment_type must be 'pickup' or 'delivery'")
    is_delivery = kind == FulfillmentType.DELIVERY.value

    if is_delivery and _blank(payload.delivery_address):
        raise OrderValidationError("delivery_address is required for delivery orders")

    order_date = payload.delivery_date if is_delivery else payload.pickup_date
    if order_date is None:
        raise OrderValidationError(f"{'delivery_date' if is_delivery else 'pickup_date'} is required")
    if order_date < min_fulfillment_date(today):
        raise OrderValidationError("Order date must be at least 72 hours from now")

    window_start = payload.delivery_window_start if is_delivery else payload.pickup_time
    if _blank(window_start):
        raise OrderValidationError(
            f"{'delivery_window_start' if is_delivery else 'pickup_time'} is required"
        )

    validate_items(payload.order_data, flavor_names)
    order_data = with_default_prices(payload.order_data)

    values = {
        "status": OrderStatus.PENDING.value,
        "customer_name": payload.customer_name.strip(),
        "customer_email": payload.customer_email.strip(),
        "customer_phone": payload.customer_phone.strip(),
        "fulfillment_type": kind,
        "sms_opt_in": payload.sms_opt_in,
        "email_opt_in": payload.email_opt_in,
        "order_data": order_data.model_dump(),
        # fee is quoted later by staff
        "delivery_fee": 0,
        "total_price": total_price(order_data),
        "production_deadline": production_deadline(order_date),
        "bake_deadline": bake_deadline(order_date, window_start),
    }
    if is_delivery:
        values.update(
            delivery_date=order_date,
            delivery_window_start=window_start.strip(),
            delivery_window_end=(payload.delivery_window_end or "").strip() or None,
            delivery_address=payload.delivery_address.strip(),
            delivery_notes=(payload.delivery_notes or "").strip() or None,
        )
    else:
        values.update(pickup_date=order_date, pickup_time=window_start.strip())
    return values


# ---------- PERSISTENCE ----------
def active_flavor_names(db: Session) -> list:
    return [name for (name,) in db.query(Flavor.name).filter(Flavor.available.is_(True)).all()]


def create_order(db: Session, payload: CreateOrderIn, today: Optional[date] = None) -> Order:
    """Validate, price and store a new pending order."""
    values = validate_order(payload, active_flavor_names(db), today=today)

    order = Order(**values)
    db.add(order)
    db.flush()

    if is_closed_day(order.fulfillment_date):
        db.add(OrderNote(
            order_id=order.id,
            note_type=NoteType.INQUIRY.value,
            content=(
                f"Requested {order.fulfillment_date:%A} {order.fulfillment_date.isoformat()}: "
                "we are normally closed, confirm availability with the customer."
            ),
        ))

    db.commit()
    db.refresh(order)
    logger.info("Order #%s created for %s (%s)", order.id, order.customer_email, order.fulfillment_type)
    return order


def order_data_of(order: Order) -> OrderData:
    return OrderData.model_validate(order.order_data or {})


def order_to_dict(order: Order) -> dict:
    return {
        "id": order.id,
        "status": order.status,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "customer_phone": order.customer_phone,
        "fulfillment_type": order.fulfillment_type,
        "pickup_date": order.pickup_date.isoformat() if order.pickup_date else None,
        "pickup_time": order.pickup_time,
        "delivery_date": order.delivery_date.isoformat() if order.delivery_date else None,
        "delivery_window_start": order.delivery_window_start,
        "delivery_window_end": order.delivery_window_end,
        "delivery_address": order.delivery_address,
        "delivery_notes": order.delivery_notes,
        "delivery_fee": order.delivery_fee,
        "sms_opt_in": bool(order.sms_opt_in),
        "email_opt_in": bool(order.email_opt_in),
        "order_data": order.order_data,
        "production_deadline": order.production_deadline.isoformat(),
        "bake_deadline": order.bake_deadline.isoformat(),
        "total_price": order.total_price,
        "kitchen_notified": bool(order.kitchen_notified),
        "rejection_reason": order.rejection_reason,
        "courier_status": order.courier_status,
        "courier_notes": order.courier_notes,
        "production_done": bool(order.production_done),
        "production_done_at": order.production_done_at.isoformat() if order.production_done_at else None,
    }
