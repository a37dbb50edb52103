# catering/schemas.py
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


# -------------------
# Order payload
# -------------------
class FlavorPortion(BaseModel):
    name: str
    quantity: int = Field(ge=0)


class OrderItem(BaseModel):
    type: str                       # party_box | big_box
    quantity: int = Field(default=1, ge=1)
    price_cents: Optional[int] = Field(default=None, ge=0)
    flavors: List[FlavorPortion] = []


class Addon(BaseModel):
    name: str
    quantity: int = Field(default=1, ge=1)
    price_cents: int = Field(ge=0)


class OrderData(BaseModel):
    items: List[OrderItem] = []
    addons: List[Addon] = []


class CreateOrderIn(BaseModel):
    # contact fields are checked in services.orders so the message is readable
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None

    fulfillment_type: Optional[str] = None
    pickup_date: Optional[date] = None
    pickup_time: Optional[str] = None
    delivery_date: Optional[date] = None
    delivery_window_start: Optional[str] = None
    delivery_window_end: Optional[str] = None
    delivery_address: Optional[str] = None
    delivery_notes: Optional[str] = None

    sms_opt_in: bool = False
    email_opt_in: bool = False

    order_data: OrderData = OrderData()


class UpdateOrderIn(BaseModel):
    status: Optional[str] = None
    rejection_reason: Optional[str] = None
    courier_status: Optional[str] = None
    courier_notes: Optional[str] = None
    kitchen_notified: Optional[bool] = None
    production_done: Optional[bool] = None
    delivery_fee: Optional[int] = Field(default=None, ge=0)   # cents


class NoteIn(BaseModel):
    note_type: str = ""
    content: str = ""


class DeliveryFeeIn(BaseModel):
    miles: float = Field(ge=0)
    gas_price: float = Field(ge=0)
    setup_required: bool = False
    wait_minutes: int = Field(default=0, ge=0)
    apply: bool = False


# -------------------
# Catalog
# -------------------
class FlavorIn(BaseModel):
    name: str = ""
    description: Optional[str] = None


class FlavorPatch(BaseModel):
    # empty body -> toggle availability
    available: Optional[bool] = None
    description: Optional[str] = None
    sort_order: Optional[int] = None


class MenuItemIn(BaseModel):
    name: str = ""
    category: str = ""
    price_cents: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = None


class MenuItemPatch(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price_cents: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = None
    available: Optional[bool] = None
    sort_order: Optional[int] = None


class FaqIn(BaseModel):
    question: str
    answer: str
    display_order: Optional[int] = None


# -------------------
# Customers / email / auth
# -------------------
class ExportIn(BaseModel):
    phone_numbers: List[str] = []
    notes: Optional[str] = None


class EmailSettingIn(BaseModel):
    trigger_name: str
    enabled: bool
    recipients: str = ""


class EmailTemplateIn(BaseModel):
    trigger_name: str
    subject: str
    body_html: str
    customer_subject: str = ""
    customer_body_html: str = ""


class EmailTestIn(BaseModel):
    to: str = ""
    trigger_name: str = ""


class LoginIn(BaseModel):
    username: str = ""
    password: str = ""
