# menulens/main.py
from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import Body, Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

load_dotenv()

from .db import Base, SessionLocal, engine, get_db
from .ordering.catalog import MenuParseError, ingest_parse_result
from .ordering.currency import normalize_currency, target_currency_for_language
from .ordering.history import dump_history, load_history
from .ordering.rates import resolve_rate
from .ordering.session import (
    SessionState,
    SessionStore,
    apply_cart_delta,
    current_summary,
    delete_history,
    effective_rate,
    finish_order,
    latest_record,
    reset_cart,
    set_exchange_rate,
    set_target_currency,
    start_session,
)
from .ordering.summary import format_summary
from .storage import HISTORY_KEY, TARGET_CURRENCY_KEY, read_value, write_value


# -------------------
# Config (env-driven)
# -------------------
class Settings(BaseModel):
    live_rates_enabled: bool = os.getenv("LIVE_RATES_ENABLED", "1").strip().lower() not in {"0", "false"}
    target_currency_default: str = os.getenv("TARGET_CURRENCY", "USD").strip().upper() or "USD"


settings = Settings()

app = FastAPI(
    title="Menu Lens Ordering API",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

Base.metadata.create_all(bind=engine)


# -------------------
# Schemas
# -------------------
class CartDeltaIn(BaseModel):
    delta: int = 1


class CurrencyPrefIn(BaseModel):
    currency: Optional[str] = None
    language: Optional[str] = None


# -------------------
# Session bootstrap (persisted state is read once)
# -------------------
def load_session_state(db: Session) -> SessionState:
    history = load_history(read_value(db, HISTORY_KEY))
    target = (read_value(db, TARGET_CURRENCY_KEY) or "").strip().upper()
    return SessionState(history=history, target_currency=target or settings.target_currency_default)


def bootstrap_state() -> SessionState:
    db = SessionLocal()
    try:
        return load_session_state(db)
    finally:
        db.close()


store = SessionStore(bootstrap_state())


# -------------------
# Helpers
# -------------------
def _dump(model: Optional[BaseModel]) -> Optional[Dict[str, Any]]:
    if model is None:
        return None
    return model.model_dump(by_alias=True, mode="json")


def _history_view(state: SessionState) -> List[Dict[str, Any]]:
    return [_dump(r) for r in state.history]


def _order_view(state: SessionState, split: int = 1) -> Dict[str, Any]:
    summary = current_summary(state, split)
    catalog = state.catalog
    target = catalog.target_currency_code if catalog else state.target_currency
    return {
        "cart": [_dump(e) for e in state.cart.values()],
        "exchangeRate": effective_rate(state),
        "currency": normalize_currency(catalog.original_currency_label) if catalog else None,
        "targetCurrency": target,
        "summary": _dump(summary),
        "summaryText": format_summary(state.cart, catalog, summary, target),
    }


def _save_history(db: Session) -> None:
    write_value(db, HISTORY_KEY, dump_history(store.state.history))


# -------------------
# Health
# -------------------
@app.get("/")
def root():
    return {"ok": True, "service": "menulens-api"}


# -------------------
# Menu (one catalog per scan)
# -------------------
@app.post("/menu")
async def load_menu(payload: Dict[str, Any] = Body(...)):
    try:
        catalog = ingest_parse_result(payload, store.state.target_currency)
    except MenuParseError as e:
        raise HTTPException(status_code=400, detail=str(e))

    store.dispatch(start_session, catalog)

    rate = await run_in_threadpool(
        resolve_rate,
        catalog.original_currency_label,
        catalog.target_currency_code,
        catalog.exchange_rate,
        settings.live_rates_enabled,
    )
    # the user may have scanned again while the lookup was in flight
    state = store.dispatch(set_exchange_rate, rate, catalog.scan_token)

    return {"menu": _dump(state.catalog), **_order_view(state)}


@app.get("/menu")
async def get_menu():
    state = store.state
    if state.catalog is None:
        raise HTTPException(status_code=404, detail="No menu loaded")
    return _dump(state.catalog)


# -------------------
# Cart
# -------------------
@app.post("/cart/{item_id}")
async def update_cart(item_id: str, payload: CartDeltaIn):
    if store.state.catalog is None:
        raise HTTPException(status_code=400, detail="No menu loaded")
    state = store.dispatch(apply_cart_delta, item_id, payload.delta)
    return _order_view(state)


@app.get("/order/summary")
async def order_summary(split: int = Query(default=1, ge=1)):
    return _order_view(store.state, split)


@app.post("/order/reset")
async def order_reset():
    state = store.dispatch(reset_cart)
    return {"ok": True, **_order_view(state)}


@app.post("/order/finish")
async def order_finish(db: Session = Depends(get_db)):
    if not store.state.cart:
        raise HTTPException(status_code=400, detail="Order is empty")

    before = store.state.history
    state = store.dispatch(finish_order)
    recorded = state.history is not before
    if recorded:
        _save_history(db)

    return {
        "ok": True,
        "record": _dump(latest_record(state)) if recorded else None,
        **_order_view(state),
    }


# -------------------
# History
# -------------------
@app.get("/history")
async def get_history():
    return _history_view(store.state)


@app.delete("/history/{record_id}")
async def remove_history(record_id: str, db: Session = Depends(get_db)):
    before = store.state
    state = store.dispatch(delete_history, record_id)
    deleted = state is not before
    if deleted:
        _save_history(db)
    return {"ok": True, "deleted": deleted}


# -------------------
# Preferences
# -------------------
@app.get("/preferences/currency")
async def get_currency_pref():
    return {"currency": store.state.target_currency}


@app.put("/preferences/currency")
async def put_currency_pref(payload: CurrencyPrefIn, db: Session = Depends(get_db)):
    if payload.currency and payload.currency.strip():
        code = normalize_currency(payload.currency)
    elif payload.language and payload.language.strip():
        code = target_currency_for_language(payload.language)
    else:
        raise HTTPException(status_code=400, detail="Provide a currency or a language")

    state = store.dispatch(set_target_currency, code)
    write_value(db, TARGET_CURRENCY_KEY, state.target_currency)
    return {"currency": state.target_currency}
