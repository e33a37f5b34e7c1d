# menulens/models.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text

from .db import Base


class StoredValue(Base):
    __tablename__ = "stored_values"
    key = Column(String, primary_key=True)
    value = Column(Text, default="")
    updated_at = Column(DateTime, default=datetime.utcnow)
