# catering/notify/dispatcher.py
"""
Trigger -> email mapping.

Templates live in the email_templates table and use {{name}} markers. Only
the names in PLACEHOLDERS are substituted; anything else renders as "".
"""
import logging
import re
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from fastapi import BackgroundTasks
from markupsafe import escape
from sqlalchemy.orm import Session

from catering import config
from catering.models.email import EmailSetting, EmailTemplate
from catering.models.order import Order
from catering.notify.email_notify import EmailMessage, notifier
from catering.services.orders import BOX_SPECS, bake_deadline, production_deadline
from catering.templating import render
from catering.utils.enums import Trigger

logger = logging.getLogger(__name__)

PLACEHOLDERS = (
    "order_id",
    "customer_name",
    "customer_email",
    "customer_phone",
    "fulfillment_type",
    "fulfillment_date",
    "fulfillment_time",
    "delivery_address_line",
    "total",
    "delivery_fee",
    "items_html",
    "addons_html",
    "rejection_reason",
    "admin_url",
    "production_sheet",
    "schedule_date",
    "schedule_html",
)

PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")

KITCHEN_TRIGGERS = {Trigger.ORDER_PAID.value, Trigger.PRODUCTION_ALERT_KITCHEN.value}


# values that are already rendered HTML; everything else is escaped in bodies
HTML_PLACEHOLDERS = frozenset({
    "delivery_address_line",
    "items_html",
    "addons_html",
    "production_sheet",
    "schedule_html",
})


def substitute(text: str, values: Dict[str, str], html: bool = False) -> str:
    """Fill {{name}} markers. With html=True plain values are HTML-escaped."""
    def repl(m):
        key = m.group(1)
        if key not in PLACEHOLDERS:
            return ""
        value = str(values.get(key) or "")
        if html and key not in HTML_PLACEHOLDERS:
            return str(escape(value))
        return value
    return PLACEHOLDER_RE.sub(repl, text or "")


def format_price(cents: int) -> str:
    return f"${(cents or 0) / 100:,.2f}"


def order_values(order: Order, production_sheet: Optional[str] = None) -> Dict[str, str]:
    data = order.order_data or {}
    is_delivery = order.fulfillment_type == "delivery"
    values = dict.fromkeys(PLACEHOLDERS, "")
    values.update(
        order_id=str(order.id),
        customer_name=order.customer_name or "",
        customer_email=order.customer_email or "",
        customer_phone=order.customer_phone or "",
        fulfillment_type="Delivery" if is_delivery else "Pickup",
        fulfillment_date=order.fulfillment_date.isoformat() if order.fulfillment_date else "",
        fulfillment_time=order.fulfillment_time_display,
        delivery_address_line=(
            f"<p><strong>Address:</strong> {escape(order.delivery_address or '')}</p>" if is_delivery else ""
        ),
        total=format_price(order.total_price),
        delivery_fee=format_price(order.delivery_fee),
        items_html=render("email/items.html", items=data.get("items", []), specs=BOX_SPECS),
        addons_html=render("email/addons.html", addons=data.get("addons", [])),
        rejection_reason=order.rejection_reason or "",
        admin_url=f"{config.BASE_URL.rstrip('/')}/admin",
        production_sheet=production_sheet or "",
    )
    return values


def recipients_for(setting: Optional[EmailSetting], trigger: str) -> List[str]:
    raw = (setting.recipients if setting else "") or ""
    emails = [e.strip() for e in raw.split(",") if e.strip()]
    if emails:
        return emails
    fallback = config.KITCHEN_EMAIL if trigger in KITCHEN_TRIGGERS else config.ADMIN_EMAIL
    return [fallback] if fallback else []


def _load(db: Session, trigger: str):
    setting = db.get(EmailSetting, trigger)
    if setting is None or not setting.enabled:
        logger.debug("Trigger %s disabled or not configured", trigger)
        return None, None
    template = db.get(EmailTemplate, trigger)
    if template is None:
        logger.warning("No email template for trigger %s", trigger)
        return None, None
    return setting, template


def build_messages(template: EmailTemplate, values: Dict[str, str], staff: List[str],
                   customer_email: Optional[str], trigger: str, subject_prefix: str = "") -> List[EmailMessage]:
    messages = []
    if staff and template.subject:
        messages.append(EmailMessage(
            to=staff,
            subject=subject_prefix + substitute(template.subject, values),
            html=substitute(template.body_html, values, html=True),
            trigger=trigger,
        ))
    if customer_email and template.customer_subject and template.customer_body_html:
        messages.append(EmailMessage(
            to=[customer_email],
            subject=subject_prefix + substitute(template.customer_subject, values),
            html=substitute(template.customer_body_html, values, html=True),
            trigger=trigger,
        ))
    return messages


def prepare(db: Session, trigger: str, order: Order, production_sheet: Optional[str] = None) -> List[EmailMessage]:
    setting, template = _load(db, trigger)
    if template is None:
        return []
    values = order_values(order, production_sheet)
    return build_messages(template, values, recipients_for(setting, trigger), order.customer_email, trigger)


def prepare_scheduled(db: Session, trigger: str, day: date, schedule_html: str) -> List[EmailMessage]:
    setting, template = _load(db, trigger)
    if template is None:
        return []
    values = dict.fromkeys(PLACEHOLDERS, "")
    values.update(
        schedule_date=day.strftime("%A, %B %d"),
        schedule_html=schedule_html,
        admin_url=f"{config.BASE_URL.rstrip('/')}/admin",
    )
    return build_messages(template, values, recipients_for(setting, trigger), None, trigger)


def _queue(background_tasks: Optional[BackgroundTasks], messages: List[EmailMessage]) -> int:
    if not messages:
        return 0
    if background_tasks is None:
        notifier.deliver(messages)
    else:
        background_tasks.add_task(notifier.deliver, messages)
    return len(messages)


def dispatch(background_tasks: Optional[BackgroundTasks], db: Session, trigger: str, order: Order,
             production_sheet: Optional[str] = None) -> int:
    """Queue the emails of `trigger` for `order`; never raises."""
    try:
        messages = prepare(db, trigger, order, production_sheet)
    except Exception:
        logger.exception("Could not prepare %s notification for order #%s", trigger, order.id)
        return 0
    return _queue(background_tasks, messages)


def dispatch_scheduled(background_tasks: Optional[BackgroundTasks], db: Session, trigger: str,
                       day: date, schedule_html: str) -> int:
    try:
        messages = prepare_scheduled(db, trigger, day, schedule_html)
    except Exception:
        logger.exception("Could not prepare scheduled %s notification", trigger)
        return 0
    return _queue(background_tasks, messages)


# ---------- TEST EMAILS ----------
def sample_order() -> Order:
    """Unsaved order used to preview templates."""
    day = date.today() + timedelta(days=4)
    return Order(
        id=999,
        status="pending",
        created_at=datetime.utcnow(),
        customer_name="Sample Customer",
        customer_email="customer@example.com",
        customer_phone="(212) 555-1234",
        fulfillment_type="pickup",
        pickup_date=day,
        pickup_time="2:00 PM",
        delivery_fee=0,
        total_price=31900,
        production_deadline=production_deadline(day),
        bake_deadline=bake_deadline(day, "2:00 PM"),
        rejection_reason="Sample reason",
        order_data={
            "items": [
                {"type": "party_box", "quantity": 1, "price_cents": 22500,
                 "flavors": [{"name": "Cheese", "quantity": 20}, {"name": "Spinach Artichoke", "quantity": 20}]},
                {"type": "big_box", "quantity": 1, "price_cents": 7800,
                 "flavors": [{"name": "Potato Leek", "quantity": 8}]},
            ],
            "addons": [{"name": "Extra Spicy Schug", "quantity": 2, "price_cents": 800}],
        },
    )


def prepare_test(db: Session, trigger: str, to: str) -> List[EmailMessage]:
    template = db.get(EmailTemplate, trigger)
    if template is None:
        return []
    values = order_values(sample_order(), "<p><em>[Production sheet would appear here for paid orders]</em></p>")
    values.update(
        schedule_date=date.today().strftime("%A, %B %d"),
        schedule_html="<p><em>[Schedule would appear here]</em></p>",
    )
    # both copies go to the tester
    return build_messages(template, values, [to], to, trigger, subject_prefix="[TEST] ")


# ---------- DEFAULT TEMPLATES ----------
_ORDER_BLOCK = (
    "<p><strong>Order ID:</strong> #{{order_id}}</p>"
    "<p><strong>Customer:</strong> {{customer_name}}</p>"
    "<p><strong>Email:</strong> {{customer_email}}</p>"
    "<p><strong>Phone:</strong> {{customer_phone}}</p>"
    "<p><strong>Type:</strong> {{fulfillment_type}}</p>"
    "<p><strong>Date:</strong> {{fulfillment_date}}</p>"
    "<p><strong>Time:</strong> {{fulfillment_time}}</p>"
    "{{delivery_address_line}}"
    "<p><strong>Total:</strong> {{total}}</p>"
    "<h3>Order Details:</h3>{{items_html}}{{addons_html}}"
)
_ADMIN_LINK = '<p><a href="{{admin_url}}">View in Admin Dashboard</a></p>'

DEFAULT_TEMPLATES: Dict[str, Dict[str, str]] = {
    Trigger.NEW_ORDER.value: {
        "subject": "New Catering Request #{{order_id}} - {{customer_name}}",
        "body_html": "<h2>New Catering Order Request</h2>" + _ORDER_BLOCK + _ADMIN_LINK,
        "customer_subject": "We received your catering request #{{order_id}}",
        "customer_body_html": (
            "<p>Hi {{customer_name}},</p><p>Thanks for your request! We will confirm "
            "availability and get back to you shortly.</p>" + _ORDER_BLOCK
        ),
    },
    Trigger.ORDER_APPROVED.value: {
        "subject": "Order #{{order_id}} approved",
        "body_html": "<h2>Order approved</h2>" + _ORDER_BLOCK + _ADMIN_LINK,
        "customer_subject": "Your catering order #{{order_id}} is confirmed",
        "customer_body_html": (
            "<p>Hi {{customer_name}},</p><p>Good news: we can make your order for "
            "{{fulfillment_date}} at {{fulfillment_time}}. Total: {{total}}.</p>" + _ORDER_BLOCK
        ),
    },
    Trigger.ORDER_REJECTED.value: {
        "subject": "Order #{{order_id}} rejected",
        "body_html": "<h2>Order rejected</h2><p>Reason: {{rejection_reason}}</p>" + _ORDER_BLOCK,
        "customer_subject": "About your catering request #{{order_id}}",
        "customer_body_html": (
            "<p>Hi {{customer_name}},</p><p>Unfortunately we can't take this order.</p>"
            "<p>{{rejection_reason}}</p>"
        ),
    },
    Trigger.ORDER_PAID.value: {
        "subject": "PAID Order #{{order_id}} - {{fulfillment_date}}",
        "body_html": (
            "<h2>New Confirmed Order for Production</h2>"
            "<p><strong>Order ID:</strong> #{{order_id}}</p>"
            "<p><strong>Customer:</strong> {{customer_name}}</p>"
            "<p><strong>Fulfillment Date:</strong> {{fulfillment_date}}</p>"
            "<p><strong>{{fulfillment_type}}:</strong> {{fulfillment_time}}</p>"
            "<hr/><h3>PRINT THIS SECTION FOR KITCHEN:</h3>{{production_sheet}}<hr/>" + _ADMIN_LINK
        ),
        "customer_subject": "Payment received for order #{{order_id}}",
        "customer_body_html": "<p>Hi {{customer_name}},</p><p>We received your payment. See you on {{fulfillment_date}}!</p>",
    },
    Trigger.ORDER_COMPLETED.value: {
        "subject": "Order #{{order_id}} completed",
        "body_html": "<p>Order #{{order_id}} for {{customer_name}} is complete.</p>",
        "customer_subject": "Thank you for your order!",
        "customer_body_html": "<p>Hi {{customer_name}},</p><p>Thanks for choosing us. Enjoy!</p>",
    },
    Trigger.DELIVERY_FEE_CONFIRMED.value: {
        "subject": "Delivery fee set for order #{{order_id}}",
        "body_html": "<p>Delivery fee {{delivery_fee}}, new total {{total}}.</p>" + _ADMIN_LINK,
        "customer_subject": "Your delivery fee for order #{{order_id}}",
        "customer_body_html": (
            "<p>Hi {{customer_name}},</p><p>The delivery fee for your order is {{delivery_fee}}. "
            "Your new total is {{total}}.</p>"
        ),
    },
    Trigger.PRODUCTION_DONE.value: {
        "subject": "Production done: order #{{order_id}}",
        "body_html": "<p>Order #{{order_id}} ({{customer_name}}) is baked and packed for {{fulfillment_time}}.</p>",
        "customer_subject": "",
        "customer_body_html": "",
    },
    Trigger.DAILY_SCHEDULE_FOH.value: {
        "subject": "Tomorrow's Catering Schedule - {{schedule_date}}",
        "body_html": "{{schedule_html}}" + _ADMIN_LINK,
        "customer_subject": "",
        "customer_body_html": "",
    },
    Trigger.PRODUCTION_ALERT_KITCHEN.value: {
        "subject": "Production Needed - {{schedule_date}}",
        "body_html": "{{schedule_html}}",
        "customer_subject": "",
        "customer_body_html": "",
    },
}
