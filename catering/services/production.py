# catering/services/production.py
"""Production sheet, next-day FOH schedule and 48h kitchen alert."""
from collections import OrderedDict, defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from catering.errors import OrderValidationError
from catering.models.order import Order
from catering.services.orders import BOX_SPECS, order_data_of, parse_time
from catering.templating import render
from catering.utils.enums import BoxType, OrderStatus


@dataclass
class DaySummary:
    day: date
    orders: List[Order] = field(default_factory=list)
    party_boxes: int = 0
    big_boxes: int = 0
    flavor_totals: Dict[str, int] = field(default_factory=dict)
    addon_totals: Dict[str, int] = field(default_factory=dict)

    @property
    def party_pieces(self) -> int:
        return self.party_boxes * BOX_SPECS[BoxType.PARTY_BOX.value].pieces

    @property
    def big_pieces(self) -> int:
        return self.big_boxes * BOX_SPECS[BoxType.BIG_BOX.value].pieces

    @property
    def flavors_by_volume(self):
        return sorted(self.flavor_totals.items(), key=lambda kv: (-kv[1], kv[0]))


def summarize_day(day: date, orders: List[Order]) -> DaySummary:
    summary = DaySummary(day=day, orders=list(orders))
    flavors: Dict[str, int] = defaultdict(int)
    addons: Dict[str, int] = defaultdict(int)
    for order in orders:
        data = order_data_of(order)
        for item in data.items:
            if item.type == BoxType.PARTY_BOX.value:
                summary.party_boxes += item.quantity
            else:
                summary.big_boxes += item.quantity
            for f in item.flavors:
                flavors[f.name] += f.quantity * item.quantity
        for a in data.addons:
            addons[a.name] += a.quantity
    summary.flavor_totals = dict(flavors)
    summary.addon_totals = dict(addons)
    return summary


def group_by_date(orders: List[Order]) -> List[DaySummary]:
    by_date: Dict[date, List[Order]] = OrderedDict()
    for order in sorted(orders, key=lambda o: (o.fulfillment_date or date.max, o.id)):
        by_date.setdefault(order.fulfillment_date, []).append(order)
    return [summarize_day(d, day_orders) for d, day_orders in by_date.items()]


def _time_key(order: Order):
    try:
        return parse_time(order.fulfillment_time)
    except OrderValidationError:
        return datetime.max.time()


# ---------- QUERIES ----------
def paid_orders(db: Session) -> List[Order]:
    return db.query(Order).filter(Order.status == OrderStatus.PAID.value).all()


def _on_date(day: date):
    return or_(
        and_(Order.fulfillment_type == "delivery", Order.delivery_date == day),
        and_(Order.fulfillment_type == "pickup", Order.pickup_date == day),
    )


def foh_orders(db: Session, day: date) -> List[Order]:
    """Everything not rejected that leaves the shop on `day`, by window start."""
    rows = (
        db.query(Order)
        .filter(Order.status != OrderStatus.REJECTED.value)
        .filter(_on_date(day))
        .all()
    )
    return sorted(rows, key=_time_key)


def kitchen_orders(db: Session, day: date) -> List[Order]:
    rows = (
        db.query(Order)
        .filter(Order.status.in_([OrderStatus.APPROVED.value, OrderStatus.PAID.value]))
        .filter(_on_date(day))
        .all()
    )
    return sorted(rows, key=_time_key)


# ---------- HTML ----------
def production_sheet_html(orders: List[Order], generated_at: Optional[datetime] = None) -> str:
    return render(
        "email/production_sheet.html",
        days=group_by_date(orders),
        generated_at=generated_at or datetime.now(),
    )


def foh_schedule_html(orders: List[Order], day: date) -> str:
    return render("email/foh_schedule.html", orders=orders, day=day, summary=summarize_day(day, orders))


def kitchen_alert_html(orders: List[Order], day: date) -> str:
    return render("email/kitchen_alert.html", orders=orders, day=day, summary=summarize_day(day, orders))


def schedule_dates(today: Optional[date] = None):
    today = today or date.today()
    return today + timedelta(days=1), today + timedelta(days=2)
