from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"
    COMPLETED = "completed"


class FulfillmentType(str, Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


class BoxType(str, Enum):
    PARTY_BOX = "party_box"
    BIG_BOX = "big_box"


class Trigger(str, Enum):
    NEW_ORDER = "new_order"
    ORDER_APPROVED = "order_approved"
    ORDER_REJECTED = "order_rejected"
    ORDER_PAID = "order_paid"
    ORDER_COMPLETED = "order_completed"
    DELIVERY_FEE_CONFIRMED = "delivery_fee_confirmed"
    PRODUCTION_DONE = "production_done"
    DAILY_SCHEDULE_FOH = "daily_schedule_foh"
    PRODUCTION_ALERT_KITCHEN = "production_alert_kitchen"


class NoteType(str, Enum):
    NOTE = "note"
    CALL = "call"
    EMAIL = "email"
    STATUS_CHANGE = "status_change"
    INQUIRY = "inquiry"
