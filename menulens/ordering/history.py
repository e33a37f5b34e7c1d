# menulens/ordering/history.py
from __future__ import annotations

import json
import logging
import time
from typing import Any, List, Optional, Sequence, Tuple
from uuid import uuid4

from pydantic import Field, TypeAdapter, ValidationError

from .cart import Cart, cart_lines
from .catalog import FrozenModel, MenuCatalog, MenuItem
from .currency import normalize_currency
from .summary import OrderSummary

log = logging.getLogger(__name__)


class HistoryLine(FrozenModel):
    item: MenuItem
    quantity: int = Field(ge=1)


class HistoryRecord(FrozenModel):
    id: str
    timestamp: int
    items: Tuple[HistoryLine, ...] = ()
    total_original_price: float = 0.0
    currency: str = ""


History = Tuple[HistoryRecord, ...]

_RECORDS = TypeAdapter(List[HistoryRecord])


def _now_ms() -> int:
    return int(time.time() * 1000)


def new_record_id(now_ms: int) -> str:
    # time prefix keeps ids roughly sortable, the random suffix keeps them unique
    return f"{now_ms}-{uuid4().hex[:8]}"


def build_record(
    cart: Cart,
    catalog: Optional[MenuCatalog],
    summary: OrderSummary,
    now_ms: Optional[int] = None,
) -> Optional[HistoryRecord]:
    lines = [
        HistoryLine(item=it.model_copy(deep=True), quantity=qty)
        for it, qty in cart_lines(cart, catalog)
    ]
    if not lines:
        return None

    ts = _now_ms() if now_ms is None else int(now_ms)
    return HistoryRecord(
        id=new_record_id(ts),
        timestamp=ts,
        items=tuple(lines),
        total_original_price=summary.total_original,
        currency=normalize_currency(catalog.original_currency_label if catalog else ""),
    )


def append(
    records: Sequence[HistoryRecord],
    cart: Cart,
    catalog: Optional[MenuCatalog],
    summary: OrderSummary,
    now_ms: Optional[int] = None,
) -> History:
    """Prepend a record for the finished order. Empty orders are never recorded."""
    rec = build_record(cart, catalog, summary, now_ms=now_ms)
    if rec is None:
        return tuple(records)
    return (rec,) + tuple(records)


def remove(records: Sequence[HistoryRecord], record_id: str) -> History:
    return tuple(r for r in records if r.id != record_id)


# ----------------------------
# Persisted form
# ----------------------------
def dump_history(records: Sequence[HistoryRecord]) -> str:
    return _RECORDS.dump_json(list(records), by_alias=True).decode("utf-8")


def load_history(raw: Optional[str]) -> History:
    """
    Parse the stored JSON array. Unreadable state resets to empty;
    individual bad records are dropped.
    """
    try:
        v: Any = json.loads(raw or "[]")
    except ValueError as e:
        log.warning("Stored order history is corrupt, starting empty: %s", e)
        return ()

    if not isinstance(v, list):
        log.warning("Stored order history is not a list, starting empty")
        return ()

    out: List[HistoryRecord] = []
    for i, row in enumerate(v):
        try:
            out.append(HistoryRecord.model_validate(row))
        except ValidationError as e:
            log.warning("Dropping unreadable history record %d: %s", i, e.error_count())
    return tuple(out)
