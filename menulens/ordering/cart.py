# menulens/ordering/cart.py
from __future__ import annotations

from typing import Dict, Iterator, Optional, Tuple

from pydantic import Field

from .catalog import FrozenModel, MenuCatalog, MenuItem, find_item


class CartEntry(FrozenModel):
    item_id: str
    quantity: int = Field(ge=1)


# item id -> entry; an entry with quantity <= 0 never exists
Cart = Dict[str, CartEntry]


def clear_cart() -> Cart:
    return {}


def update_quantity(cart: Cart, item_id: str, delta: int, catalog: Optional[MenuCatalog]) -> Cart:
    """
    Apply a signed quantity delta and return a new cart.

    - result <= 0 removes the entry (removing an absent entry is a no-op)
    - first add resolves the item in the catalog; unknown ids are ignored
    The input cart is never mutated.
    """
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise TypeError(f"delta must be an int, got {type(delta).__name__}")

    existing = cart.get(item_id)
    current = existing.quantity if existing else 0
    nxt = current + delta

    if nxt <= 0:
        if existing is None:
            return cart
        out = dict(cart)
        del out[item_id]
        return out

    if existing is None and find_item(catalog, item_id) is None:
        return cart

    out = dict(cart)
    out[item_id] = CartEntry(item_id=item_id, quantity=nxt)
    return out


def cart_quantity(cart: Cart) -> int:
    return sum(e.quantity for e in cart.values())


def cart_lines(cart: Cart, catalog: Optional[MenuCatalog]) -> Iterator[Tuple[MenuItem, int]]:
    """(item, quantity) pairs in menu order; entries missing from the catalog are skipped."""
    if not catalog:
        return
    for it in catalog.items:
        entry = cart.get(it.id)
        if entry is not None:
            yield it, entry.quantity
