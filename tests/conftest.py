from __future__ import annotations

import os
import tempfile

# must be set before menulens.db is imported
_DB_DIR = tempfile.mkdtemp(prefix="menulens-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR}/test.db"
os.environ["LIVE_RATES_ENABLED"] = "1"
os.environ.pop("FALLBACK_EXCHANGE_RATE", None)
os.environ.pop("DEFAULT_CURRENCY", None)

import pytest

from menulens.ordering.catalog import MenuCatalog, MenuItem


@pytest.fixture
def catalog() -> MenuCatalog:
    return MenuCatalog(
        items=(
            MenuItem(id="A", original_name="ラーメン", translated_name="Ramen", price=100, category="Main"),
            MenuItem(id="B", original_name="餃子", translated_name="Gyoza", price=450, category="Side"),
            MenuItem(
                id="C",
                original_name="ビール",
                translated_name="Beer",
                price=600,
                category="Drink",
                allergen_flag=True,
                dietary_tags=frozenset({"alcohol"}),
            ),
        ),
        original_currency_label="JPY",
        target_currency_code="USD",
        exchange_rate=0.0067,
        detected_language="Japanese",
        scan_token="t0",
    )


@pytest.fixture
def parse_result() -> dict:
    return {
        "originalCurrency": "円",
        "exchangeRate": 0.0065,
        "detectedLanguage": "Japanese",
        "items": [
            {"originalName": "ラーメン", "translatedName": "Ramen", "price": 100, "category": "Main"},
            {
                "originalName": "えび天",
                "translatedName": "Shrimp tempura",
                "price": 800,
                "allergyWarning": True,
                "dietaryTags": ["seafood", "", 3],
                "description": "Fried shrimp",
            },
        ],
    }
