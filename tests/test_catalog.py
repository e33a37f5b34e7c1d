from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from menulens.ordering.catalog import MenuCatalog, MenuItem, MenuParseError, find_item, ingest_parse_result


def test_ingest_assigns_ids_and_defaults(parse_result):
    cat = ingest_parse_result(parse_result, "usd")

    assert cat.original_currency_label == "円"
    assert cat.target_currency_code == "USD"
    assert cat.exchange_rate == pytest.approx(0.0065)
    assert cat.detected_language == "Japanese"
    assert len(cat.items) == 2

    ramen, shrimp = cat.items
    assert ramen.id == f"item-0-{cat.scan_token}"
    assert shrimp.id == f"item-1-{cat.scan_token}"
    assert ramen.category == "Main"
    assert ramen.allergen_flag is False
    assert ramen.dietary_tags == frozenset()
    assert ramen.description == ""
    assert shrimp.category == "General"
    assert shrimp.allergen_flag is True
    assert shrimp.dietary_tags == frozenset({"seafood"})
    assert shrimp.description == "Fried shrimp"


def test_ingest_accepts_json_text(parse_result):
    cat = ingest_parse_result(json.dumps(parse_result), "EUR")
    assert [it.translated_name for it in cat.items] == ["Ramen", "Shrimp tempura"]


def test_each_scan_gets_fresh_ids(parse_result):
    a = ingest_parse_result(parse_result, "USD")
    b = ingest_parse_result(parse_result, "USD")
    assert {it.id for it in a.items}.isdisjoint({it.id for it in b.items})


def test_optional_top_level_fields_default(parse_result):
    del parse_result["originalCurrency"]
    del parse_result["detectedLanguage"]
    parse_result["exchangeRate"] = -2
    cat = ingest_parse_result(parse_result, "USD")
    assert cat.original_currency_label == ""
    assert cat.detected_language == "Unknown"
    assert cat.exchange_rate == 1.0


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.pop("items"),
        lambda d: d.update(items="ramen"),
        lambda d: d["items"].append("not an object"),
        lambda d: d["items"][0].pop("price"),
        lambda d: d["items"][0].update(price="cheap"),
        lambda d: d["items"][0].update(price=-1),
        lambda d: d["items"][0].update(price=True),
        lambda d: d["items"][0].update(price=10**400),
        lambda d: d["items"][1].pop("translatedName"),
        lambda d: d["items"][1].update(originalName="   "),
    ],
)
def test_malformed_input_is_rejected(parse_result, mutate):
    mutate(parse_result)
    with pytest.raises(MenuParseError):
        ingest_parse_result(parse_result, "USD")


@pytest.mark.parametrize("payload", ["{not json", "[1, 2]", 42, None])
def test_non_object_payload_is_rejected(payload):
    with pytest.raises(MenuParseError):
        ingest_parse_result(payload, "USD")


def test_numeric_string_price_is_accepted(parse_result):
    parse_result["items"][0]["price"] = "1200"
    cat = ingest_parse_result(parse_result, "USD")
    assert cat.items[0].price == 1200.0


def test_catalog_is_immutable(catalog):
    with pytest.raises(ValidationError):
        catalog.exchange_rate = 2.0
    with pytest.raises(ValidationError):
        catalog.items[0].price = 1


def test_duplicate_ids_rejected():
    it = MenuItem(id="X", original_name="a", translated_name="a", price=1)
    with pytest.raises(ValidationError):
        MenuCatalog(items=(it, it))


def test_find_item(catalog):
    assert find_item(catalog, "B").translated_name == "Gyoza"
    assert find_item(catalog, "nope") is None
    assert find_item(None, "A") is None
    assert find_item(catalog, "") is None


def test_oversized_rate_estimate_uses_fallback(parse_result):
    parse_result["exchangeRate"] = 10**400
    assert ingest_parse_result(parse_result, "USD").exchange_rate == 1.0
