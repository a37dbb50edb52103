# catering/models/order.py
from typing import List, Optional
from datetime import date, datetime

from sqlalchemy import JSON, Boolean, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catering.db import Base

__all__ = ["Order"]


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    # pending | approved | rejected | paid | completed
    status: Mapped[str] = mapped_column(String(24), default="pending", index=True)

    customer_name: Mapped[str] = mapped_column(String(120))
    customer_email: Mapped[str] = mapped_column(String(255), index=True)
    customer_phone: Mapped[str] = mapped_column(String(64))

    # === FULFILLMENT ===
    # only the group matching fulfillment_type is filled
    fulfillment_type: Mapped[str] = mapped_column(String(16), default="pickup")
    pickup_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    pickup_time: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    delivery_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    delivery_window_start: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    delivery_window_end: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    delivery_address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    delivery_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    sms_opt_in: Mapped[bool] = mapped_column(Boolean, default=False)
    email_opt_in: Mapped[bool] = mapped_column(Boolean, default=False)

    # {"items": [...], "addons": [...]}, see catering.schemas.OrderData
    order_data: Mapped[dict] = mapped_column(JSON)

    # money in cents
    total_price: Mapped[int] = mapped_column(Integer, default=0)
    delivery_fee: Mapped[int] = mapped_column(Integer, default=0)

    production_deadline: Mapped[date] = mapped_column(Date)
    bake_deadline: Mapped[datetime] = mapped_column(DateTime)

    # === ADMIN / OPERATIONS ===
    kitchen_notified: Mapped[bool] = mapped_column(Boolean, default=False)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    courier_status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    courier_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    production_done: Mapped[bool] = mapped_column(Boolean, default=False)
    production_done_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    notes: Mapped[List["OrderNote"]] = relationship(
        "OrderNote", back_populates="order", cascade="all, delete-orphan",
        order_by="OrderNote.id.desc()",
    )

    @property
    def fulfillment_date(self) -> Optional[date]:
        return self.delivery_date if self.fulfillment_type == "delivery" else self.pickup_date

    @property
    def fulfillment_time(self) -> str:
        if self.fulfillment_type == "delivery":
            return self.delivery_window_start or ""
        return self.pickup_time or ""

    @property
    def fulfillment_time_display(self) -> str:
        if self.fulfillment_type == "delivery":
            return f"{self.delivery_window_start or ''}-{self.delivery_window_end or ''}"
        return self.pickup_time or ""

    # subtotal without the quoted delivery fee
    @property
    def subtotal(self) -> int:
        return int(self.total_price or 0) - int(self.delivery_fee or 0)
