# menulens/ordering/summary.py
from __future__ import annotations

import math
from typing import List, Optional

from .cart import Cart, cart_lines, cart_quantity
from .catalog import FrozenModel, MenuCatalog
from .currency import currency_symbol, normalize_currency


class OrderSummary(FrozenModel):
    total_original: float = 0.0
    total_converted: float = 0.0
    item_count: int = 0
    per_person_original: Optional[int] = None


def summarize(cart: Cart, catalog: Optional[MenuCatalog], exchange_rate: float, split_count: int = 1) -> OrderSummary:
    """
    Totals for the current cart. Entries whose item is no longer in the
    catalog contribute nothing. Per-person shares round up so the shares
    never add up to less than the bill.
    """
    items = catalog.item_index() if catalog else {}

    total = 0.0
    for entry in cart.values():
        it = items.get(entry.item_id)
        if it is not None:
            total += it.price * entry.quantity

    split = max(1, int(split_count or 1))
    per_person = math.ceil(total / split) if split > 1 else None

    return OrderSummary(
        total_original=total,
        total_converted=total * exchange_rate,
        item_count=cart_quantity(cart),
        per_person_original=per_person,
    )


def _amount(value: float, code: str) -> str:
    sym = currency_symbol(code)
    if sym:
        return f"{sym}{value:,.2f}"
    return f"{value:,.2f} {code}"


def format_summary(cart: Cart, catalog: Optional[MenuCatalog], summary: OrderSummary, target_code: str) -> str:
    if not cart:
        return "Your order is empty."

    base = normalize_currency(catalog.original_currency_label if catalog else "")
    target = (target_code or "").strip().upper() or base

    lines: List[str] = []
    for i, (it, qty) in enumerate(cart_lines(cart, catalog), start=1):
        lines.append(f"{i}. x{qty} {it.translated_name} = {_amount(it.price * qty, base)}")

    out = "Order summary:\n" + "\n".join(lines)
    out += f"\n\nTotal: {_amount(summary.total_original, base)}"
    if target != base:
        out += f" (≈ {_amount(summary.total_converted, target)})"
    if summary.per_person_original is not None:
        out += f"\nPer person: {_amount(summary.per_person_original, base)}"
    return out
