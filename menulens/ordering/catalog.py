# menulens/ordering/catalog.py
from __future__ import annotations

import json
import math
from typing import Any, Dict, FrozenSet, List, Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .rates import fallback_rate


class MenuParseError(ValueError):
    """The parse result could not be turned into a catalog."""


class FrozenModel(BaseModel):
    """Immutable model with camelCase JSON keys."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class MenuItem(FrozenModel):
    id: str
    original_name: str
    translated_name: str
    price: float = Field(ge=0, allow_inf_nan=False)
    category: str = "General"
    allergen_flag: bool = False
    dietary_tags: FrozenSet[str] = frozenset()
    description: str = ""


class MenuCatalog(FrozenModel):
    items: Tuple[MenuItem, ...] = ()
    original_currency_label: str = ""
    target_currency_code: str = "USD"
    exchange_rate: float = Field(default=1.0, gt=0, allow_inf_nan=False)
    detected_language: str = "Unknown"
    scan_token: str = ""

    @model_validator(mode="after")
    def _unique_ids(self) -> "MenuCatalog":
        seen = set()
        for it in self.items:
            if it.id in seen:
                raise ValueError(f"Duplicate menu item id: {it.id}")
            seen.add(it.id)
        return self

    def item_index(self) -> Dict[str, MenuItem]:
        return {it.id: it for it in self.items}


def find_item(catalog: Optional[MenuCatalog], item_id: str) -> Optional[MenuItem]:
    iid = (item_id or "").strip()
    if not catalog or not iid:
        return None
    for it in catalog.items:
        if it.id == iid:
            return it
    return None


# ----------------------------
# Ingestion of parser output
# ----------------------------
def _text(v: Any, default: str = "") -> str:
    if v is None:
        return default
    s = str(v).strip()
    return s or default


def _price(raw: Dict[str, Any], index: int) -> float:
    v = raw.get("price")
    if isinstance(v, bool) or v is None:
        raise MenuParseError(f"Item {index} has no price")
    try:
        p = float(v)
    except (TypeError, ValueError, OverflowError):
        raise MenuParseError(f"Item {index} has a non-numeric price: {v!r}") from None
    if not math.isfinite(p) or p < 0:
        raise MenuParseError(f"Item {index} has an invalid price: {v!r}")
    return p


def _tags(v: Any) -> FrozenSet[str]:
    if not isinstance(v, (list, tuple, set, frozenset)):
        return frozenset()
    return frozenset(t.strip() for t in v if isinstance(t, str) and t.strip())


def _estimate(v: Any) -> float:
    if isinstance(v, bool):
        return fallback_rate()
    try:
        r = float(v)
    except (TypeError, ValueError, OverflowError):
        return fallback_rate()
    if not math.isfinite(r) or r <= 0:
        return fallback_rate()
    return r


def _load_payload(payload: Any) -> Dict[str, Any]:
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise MenuParseError(f"Parse result is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise MenuParseError("Parse result must be a JSON object")
    return payload


def _menu_item(raw: Any, index: int, scan_token: str) -> MenuItem:
    if not isinstance(raw, dict):
        raise MenuParseError(f"Item {index} is not an object")

    original = _text(raw.get("originalName"))
    translated = _text(raw.get("translatedName"))
    if not original or not translated:
        raise MenuParseError(f"Item {index} is missing originalName/translatedName")

    return MenuItem(
        id=f"item-{index}-{scan_token}",
        original_name=original,
        translated_name=translated,
        price=_price(raw, index),
        category=_text(raw.get("category"), "General"),
        allergen_flag=raw.get("allergyWarning") is True,
        dietary_tags=_tags(raw.get("dietaryTags")),
        description=_text(raw.get("description")),
    )


def ingest_parse_result(payload: Any, target_currency: str) -> MenuCatalog:
    """
    Build a catalog from the menu parser's JSON.

    All-or-nothing: any malformed required field raises MenuParseError and
    nothing is adopted. Optional fields get explicit defaults.
    """
    data = _load_payload(payload)

    raw_items = data.get("items")
    if not isinstance(raw_items, list):
        raise MenuParseError("Parse result has no items list")

    scan_token = uuid4().hex[:8]
    items: List[MenuItem] = [_menu_item(raw, i, scan_token) for i, raw in enumerate(raw_items)]

    return MenuCatalog(
        items=tuple(items),
        original_currency_label=_text(data.get("originalCurrency")),
        target_currency_code=_text(target_currency, "USD").upper(),
        exchange_rate=_estimate(data.get("exchangeRate")),
        detected_language=_text(data.get("detectedLanguage"), "Unknown"),
        scan_token=scan_token,
    )
