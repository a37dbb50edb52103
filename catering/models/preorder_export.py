# catering/models/preorder_export.py
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String

from catering.db import Base

__all__ = ["PreorderExport"]


class PreorderExport(Base):
    __tablename__ = "preorder_exports"

    id = Column(Integer, primary_key=True)
    exported_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    phone_numbers = Column(JSON, nullable=False)      # list of phone strings
    customer_count = Column(Integer, nullable=False)
    notes = Column(String(500), nullable=True)
