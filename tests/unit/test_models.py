from decimal import Decimal

import pytest

from src.api.errors import UnsupportedCurrency, UnsupportedLanguage
from src.api.models.menu import (
    BusinessRecord,
    CategoryRecord,
    Discount,
    DiscountKind,
    ItemRecord,
    sort_categories,
)
from tests.helpers.menu_fixtures import BUSINESS_JSON


def test_business_from_dict_normalizes_codes():
    b = BusinessRecord.from_dict({**BUSINESS_JSON, "languages": ["EN", "nl", "en"], "currencies": ["usd", "Eur"]})
    assert b.languages == ("en", "nl")
    assert b.currencies == ("USD", "EUR")
    assert b.theme_key == "kardi"
    assert b.supports_currency("eur")
    assert b.supports_language("NL")


def test_business_defaults_fall_back_to_first_supported():
    b = BusinessRecord.from_dict({"slug": "x", "theme": "grid", "languages": ["tr", "en"],
                                  "currencies": ["TRY"], "default_currency": "USD"})
    assert b.default_language == "tr"
    assert b.default_currency == "TRY"
    assert b.name == "x"


def test_business_minimal_payload():
    b = BusinessRecord.from_dict({"slug": "x", "theme": None})
    assert b.theme_id == ""
    assert b.languages == ("en",)
    assert b.currencies == ("USD",)
    assert b.colors.primary == "#000000"


def test_discount_variants():
    assert Discount.from_dict({"type": "percentage", "value": "15"}) == Discount(DiscountKind.PERCENT, Decimal("15"))
    assert Discount.from_dict({"type": "fixed", "value": 2}) == Discount(DiscountKind.AMOUNT, Decimal("2"))
    assert Discount.from_dict({"type": "bogus", "value": 2}) is None
    assert Discount.from_dict({"type": "percent", "value": -5}) is None
    assert Discount.from_dict(None) is None


def test_item_from_dict():
    it = ItemRecord.from_dict({
        "id": 7,
        "title": "Plain Soup",
        "prices": {"usd": 4, "EUR": "bad", "GBP": -1},
        "category_id": 3,
    })
    assert it.item_id == "7"
    assert it.titles == {"": "Plain Soup"}
    assert it.prices == {"USD": Decimal("4")}
    assert it.discount is None
    assert it.image is None
    assert it.category_id == "3"


def test_categories_sorted_stably_by_order():
    cats = [CategoryRecord.from_dict(d) for d in (
        {"id": "b", "name": "B", "order": 2},
        {"id": "a", "name": "A", "order": 1},
        {"id": "c", "name": "C", "order": 2},
        {"id": "z", "name": "Z"},
    )]
    assert [c.category_id for c in sort_categories(cats)] == ["z", "a", "b", "c"]


def test_zero_ids_are_kept():
    cat = CategoryRecord.from_dict({"id": 0, "name": "Starters"})
    assert cat.category_id == "0"

    it = ItemRecord.from_dict({"id": 0, "title": "Bread", "prices": {"USD": 1}, "category_id": 0})
    assert it.item_id == "0"
    assert it.category_id == "0"

    blank = ItemRecord.from_dict({"id": "  ", "title": "x", "category_id": ""})
    assert blank.item_id == ""
    assert blank.category_id is None


def test_require_language_and_currency():
    b = BusinessRecord.from_dict(BUSINESS_JSON)
    assert b.require_language("NL") == "nl"
    assert b.require_currency("eur") == "EUR"
    with pytest.raises(UnsupportedLanguage):
        b.require_language("fr")
    with pytest.raises(UnsupportedCurrency):
        b.require_currency("GBP")
