# menulens/storage.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from .models import StoredValue

HISTORY_KEY = "order_history"
TARGET_CURRENCY_KEY = "target_currency"


def read_value(db: Session, key: str) -> Optional[str]:
    row = db.query(StoredValue).filter(StoredValue.key == key).first()
    return row.value if row else None


def write_value(db: Session, key: str, value: str) -> None:
    """Replace the whole stored value for key."""
    row = db.query(StoredValue).filter(StoredValue.key == key).first()
    if not row:
        row = StoredValue(key=key)
    row.value = value
    row.updated_at = datetime.utcnow()

    db.add(row)
    db.commit()
