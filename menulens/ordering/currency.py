# menulens/ordering/currency.py
from __future__ import annotations

import os
import re
from typing import Dict, List, Optional, Tuple

# ----------------------------
# Currency label groups
# Order matters: the first group with a token contained in the label wins.
# Tokens are stored uppercased because labels are uppercased before matching.
# ----------------------------
_CURRENCY_GROUPS: List[Tuple[str, Tuple[str, ...]]] = [
    ("JPY", ("JPY", "JP", "YEN", "¥", "円")),
    ("KRW", ("KRW", "KR", "WON", "₩", "원")),
    ("THB", ("THB", "TH", "BAHT", "฿", "บาท")),
    ("EUR", ("EUR", "EU", "EURO", "€")),
    ("USD", ("USD", "US", "DOLLAR", "$")),
    ("GBP", ("GBP", "UK", "POUND", "£")),
    ("TWD", ("TWD", "TW", "NT")),
    ("VND", ("VND", "DONG", "₫", "Đ")),
]

_NON_ALPHA_RE = re.compile(r"[^A-Z]+")

_SYMBOLS: Dict[str, str] = {
    "JPY": "¥",
    "KRW": "₩",
    "THB": "฿",
    "EUR": "€",
    "USD": "$",
    "GBP": "£",
    "TWD": "NT$",
    "VND": "₫",
    "PHP": "₱",
}

# Translation language -> the user's home currency
_LANGUAGE_CURRENCY: Dict[str, str] = {
    "chinesetw": "TWD",
    "english": "USD",
    "korean": "KRW",
    "french": "EUR",
    "spanish": "EUR",
    "thai": "THB",
    "filipino": "PHP",
    "vietnamese": "VND",
}


def _default_currency() -> str:
    return (os.getenv("DEFAULT_CURRENCY", "JPY").strip().upper() or "JPY")


def normalize_currency(raw_label: Optional[str]) -> str:
    """
    Map whatever the menu parser returned ("JP", "¥", "円", "yen", "NT$ 120")
    to a canonical code.

    Unknown labels fall back to their alphabetic characters, which may not be
    a real code; the rate lookup degrades gracefully in that case.
    """
    if not raw_label:
        return _default_currency()

    c = str(raw_label).upper().strip()
    if not c:
        return _default_currency()

    for code, tokens in _CURRENCY_GROUPS:
        if any(t in c for t in tokens):
            return code

    return _NON_ALPHA_RE.sub("", c)


def target_currency_for_language(language: Optional[str]) -> str:
    key = re.sub(r"[\s_-]+", "", (language or "").strip().lower())
    return _LANGUAGE_CURRENCY.get(key, "USD")


def currency_symbol(code: Optional[str]) -> str:
    return _SYMBOLS.get((code or "").strip().upper(), "")
