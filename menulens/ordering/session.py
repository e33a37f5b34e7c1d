# menulens/ordering/session.py
from __future__ import annotations

from typing import Any, Callable, Optional

from pydantic import Field

from . import history as history_log
from .cart import Cart, clear_cart, update_quantity
from .catalog import FrozenModel, MenuCatalog
from .history import History, HistoryRecord
from .summary import OrderSummary, summarize


class SessionState(FrozenModel):
    """Everything the UI renders from: one catalog, its cart, the order log."""

    catalog: Optional[MenuCatalog] = None
    cart: Cart = Field(default_factory=dict)
    exchange_rate: Optional[float] = None
    history: History = ()
    target_currency: str = "USD"


# ----------------------------
# Transitions (state in -> state out)
# ----------------------------
def start_session(state: SessionState, catalog: MenuCatalog, exchange_rate: Optional[float] = None) -> SessionState:
    return state.model_copy(update={"catalog": catalog, "cart": clear_cart(), "exchange_rate": exchange_rate})


def apply_cart_delta(state: SessionState, item_id: str, delta: int) -> SessionState:
    cart = update_quantity(state.cart, item_id, delta, state.catalog)
    if cart is state.cart:
        return state
    return state.model_copy(update={"cart": cart})


def set_exchange_rate(state: SessionState, rate: float, scan_token: Optional[str] = None) -> SessionState:
    """Adopt a resolved rate. A rate resolved for a replaced catalog is dropped."""
    if state.catalog is None:
        return state
    if scan_token is not None and scan_token != state.catalog.scan_token:
        return state
    return state.model_copy(update={"exchange_rate": rate})


def effective_rate(state: SessionState) -> float:
    if state.exchange_rate is not None:
        return state.exchange_rate
    if state.catalog is not None:
        return state.catalog.exchange_rate
    return 1.0


def current_summary(state: SessionState, split_count: int = 1) -> OrderSummary:
    return summarize(state.cart, state.catalog, effective_rate(state), split_count)


def finish_order(state: SessionState, now_ms: Optional[int] = None) -> SessionState:
    """Commit the cart to history and clear it. An empty cart changes nothing."""
    if not state.cart:
        return state
    records = history_log.append(state.history, state.cart, state.catalog, current_summary(state), now_ms=now_ms)
    return state.model_copy(update={"history": records, "cart": clear_cart()})


def reset_cart(state: SessionState) -> SessionState:
    if not state.cart:
        return state
    return state.model_copy(update={"cart": clear_cart()})


def delete_history(state: SessionState, record_id: str) -> SessionState:
    records = history_log.remove(state.history, record_id)
    if len(records) == len(state.history):
        return state
    return state.model_copy(update={"history": records})


def set_target_currency(state: SessionState, code: str) -> SessionState:
    return state.model_copy(update={"target_currency": (code or "").strip().upper() or state.target_currency})


def latest_record(state: SessionState) -> Optional[HistoryRecord]:
    return state.history[0] if state.history else None


# ----------------------------
# Holder
# ----------------------------
class SessionStore:
    """
    Owns the live SessionState. Every change goes through dispatch(), which
    reads the current state, computes the next one and replaces it whole, so
    rapid sequential updates never write over each other.
    """

    def __init__(self, state: Optional[SessionState] = None):
        self._state = state or SessionState()

    @property
    def state(self) -> SessionState:
        return self._state

    def dispatch(self, transition: Callable[..., SessionState], *args: Any, **kwargs: Any) -> SessionState:
        self._state = transition(self._state, *args, **kwargs)
        return self._state
