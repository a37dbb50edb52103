# catering/models/email.py
from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catering.db import Base

__all__ = ["EmailSetting", "EmailTemplate"]


class EmailSetting(Base):
    __tablename__ = "email_settings"

    trigger_name: Mapped[str] = mapped_column(String(64), primary_key=True)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    # comma separated; empty means "use the default address from config"
    recipients: Mapped[str] = mapped_column(Text, default="")


class EmailTemplate(Base):
    __tablename__ = "email_templates"

    trigger_name: Mapped[str] = mapped_column(String(64), primary_key=True)

    # staff email
    subject: Mapped[str] = mapped_column(String(255), default="")
    body_html: Mapped[str] = mapped_column(Text, default="")

    # customer copy, sent only when both are filled
    customer_subject: Mapped[str] = mapped_column(String(255), default="")
    customer_body_html: Mapped[str] = mapped_column(Text, default="")
