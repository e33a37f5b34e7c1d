# menulens/ordering/rates.py
from __future__ import annotations

import logging
import math
import os
from typing import Any, Dict, Optional

import requests

from .currency import normalize_currency

log = logging.getLogger(__name__)


def _rate_api_url() -> str:
    return os.getenv("EXCHANGE_RATE_API_URL", "https://open.er-api.com/v6/latest").rstrip("/")


def _rate_timeout() -> float:
    raw = os.getenv("EXCHANGE_RATE_TIMEOUT", "5")
    try:
        return float(raw)
    except ValueError:
        return 5.0


def fallback_rate() -> float:
    """Last-resort rate when neither the live service nor the parser gave one."""
    raw = os.getenv("FALLBACK_EXCHANGE_RATE", "1.0")
    try:
        v = float(raw)
    except ValueError:
        return 1.0
    return v if _usable(v) else 1.0


def _usable(v: Any) -> bool:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return False
    try:
        f = float(v)
    except OverflowError:
        return False
    return math.isfinite(f) and f > 0


def fetch_rates(base_code: str) -> Dict[str, Any]:
    """
    GET {EXCHANGE_RATE_API_URL}/{base} and return its "rates" mapping.
    Raises on transport errors, non-2xx responses and malformed payloads.
    """
    resp = requests.get(f"{_rate_api_url()}/{base_code}", timeout=_rate_timeout())
    resp.raise_for_status()
    data = resp.json()

    rates = data.get("rates") if isinstance(data, dict) else None
    if not isinstance(rates, dict):
        raise ValueError(f"Rate service returned no rates for {base_code}")
    return rates


def resolve_rate(
    base_label: Optional[str],
    target_code: Optional[str],
    estimate: Optional[float] = None,
    live: bool = True,
) -> float:
    """
    Rate for 1 unit of base -> target.

    Fallback chain: live service -> parser estimate -> fixed constant.
    Never raises; every degradation is logged. live=False skips the network.
    """
    base = normalize_currency(base_label)
    target = normalize_currency(target_code)

    if base == target:
        return 1.0

    if live:
        try:
            rates = fetch_rates(base)
            value = rates.get(target)
            if _usable(value):
                log.info("Live rate: 1 %s = %s %s", base, value, target)
                return float(value)
            log.warning("Rate service has no usable %s rate for base %s", target, base)
        except Exception as e:
            log.warning("Rate lookup %s -> %s failed: %s", base, target, e)

    if _usable(estimate):
        log.warning("Using parser estimate %s for %s -> %s", estimate, base, target)
        return float(estimate)

    rate = fallback_rate()
    log.warning("No rate estimate for %s -> %s, using fallback %s", base, target, rate)
    return rate
