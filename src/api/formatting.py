# src/api/formatting.py
"""
Pure display helpers shared by every template.

None of these raise on bad input: a template always gets something it
can render (fallback image, fallback currency, some title, fallback text).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urljoin, urlparse

from .errors import ErrorCode, UnsupportedCurrency
from .models.menu import Discount, DiscountKind, to_decimal
from .text import norm_code

logger = logging.getLogger("qr-menu")

# ISO 4217 minor units that differ from 2
_MINOR_UNITS: Dict[str, int] = {
    "JPY": 0,
    "KRW": 0,
    "VND": 0,
    "CLP": 0,
    "ISK": 0,
    "HUF": 2,
    "BHD": 3,
    "KWD": 3,
    "OMR": 3,
    "JOD": 3,
    "TND": 3,
    "IQD": 3,
    "LYD": 3,
}

_NULLISH = {"null", "none", "undefined", "nan"}


def minor_units(currency: str) -> int:
    return _MINOR_UNITS.get(norm_code(currency, upper=True), 2)


# -------------------------
# Images
# -------------------------
def resolve_image(url_path: Any, fallback: str, base_url: Optional[str] = None) -> str:
    """
    Return a usable image reference.

    Accepted as-is: absolute http(s) URLs and data: URIs.
    Relative paths are joined onto base_url when one is given, and kept
    as-is (site-relative) otherwise. Anything empty or malformed -> fallback.
    """
    if not isinstance(url_path, str):
        return fallback
    ref = url_path.strip()
    if not ref or ref.lower() in _NULLISH or any(ch.isspace() for ch in ref):
        return fallback

    if ref.startswith("data:"):
        return ref if "," in ref else fallback

    parsed = urlparse(ref)
    if parsed.scheme:
        if parsed.scheme in ("http", "https") and parsed.netloc:
            return ref
        return fallback
    if ref.startswith("//"):
        return ref if parsed.netloc else fallback

    if base_url:
        return urljoin(base_url.rstrip("/") + "/", ref.lstrip("/"))
    return ref


# -------------------------
# Prices
# -------------------------
@dataclass(frozen=True)
class PriceResult:
    amount: Optional[Decimal]
    currency: Optional[str]
    fallback_used: bool = False
    error: Optional[ErrorCode] = None

    @property
    def ok(self) -> bool:
        return self.amount is not None


def _lookup(prices: Mapping[str, Any], currency: str) -> Decimal:
    code = norm_code(currency or "", upper=True)
    for k, v in prices.items():
        if norm_code(str(k), upper=True) == code:
            d = to_decimal(v)
            if d is not None:
                return d
    raise UnsupportedCurrency(f"No price in {code or '<empty>'}")


def apply_discount(amount: Decimal, discount: Optional[Discount]) -> Decimal:
    if discount is None:
        return amount
    if discount.kind == DiscountKind.PERCENT:
        pct = min(max(discount.value, Decimal(0)), Decimal(100))
        return amount * (Decimal(1) - pct / Decimal(100))
    return max(Decimal(0), amount - discount.value)


def round_minor(amount: Decimal, currency: str) -> Decimal:
    exp = Decimal(1).scaleb(-minor_units(currency))
    return amount.quantize(exp, rounding=ROUND_HALF_EVEN)


def resolve_price(
    prices: Mapping[str, Any],
    currency: str,
    discount: Optional[Discount] = None,
    default_currency: Optional[str] = None,
) -> PriceResult:
    """
    Price of an item in `currency` with discount applied, rounded to the
    currency's minor units (half-to-even).

    Fallback order when `currency` has no price:
      requested -> default_currency -> first currency in `prices`
    A fallback is reported via fallback_used + UNSUPPORTED_CURRENCY.
    """
    prices = prices or {}
    candidates = [currency]
    if default_currency:
        candidates.append(default_currency)
    candidates.extend(str(k) for k in prices.keys())

    for i, cur in enumerate(candidates):
        try:
            amount = _lookup(prices, cur)
        except UnsupportedCurrency:
            continue
        code = norm_code(cur, upper=True)
        try:
            final = round_minor(apply_discount(amount, discount), code)
        except InvalidOperation:
            # beyond the decimal context precision
            logger.warning("[price] %s %s cannot be rounded; treated as unpriced", amount, code)
            continue
        fell_back = i > 0
        if fell_back:
            logger.debug("[price] %s not priced; fell back to %s", currency, code)
        return PriceResult(
            amount=final,
            currency=code,
            fallback_used=fell_back,
            error=ErrorCode.UNSUPPORTED_CURRENCY if fell_back else None,
        )

    return PriceResult(amount=None, currency=None, fallback_used=False, error=ErrorCode.UNSUPPORTED_CURRENCY)


def format_price(result: PriceResult) -> str:
    if result.amount is None or not result.currency:
        return ""
    return f"{result.amount} {result.currency}"


# -------------------------
# Titles / translations
# -------------------------
def _titles_of(item: Any) -> Mapping[str, Any]:
    if isinstance(item, Mapping):
        return item
    titles = getattr(item, "titles", None)
    return titles if isinstance(titles, Mapping) else {}


def resolve_title(item: Any, language: str, default_language: str = "en") -> str:
    """
    hierarchy: requested lang -> default lang -> any non-empty title -> item id
    """
    titles = _titles_of(item)

    def _get(lang: str) -> Optional[str]:
        want = norm_code(lang or "")
        for k, v in titles.items():
            if norm_code(str(k)) == want and isinstance(v, str) and v.strip():
                return v.strip()
        return None

    for lang in (language, default_language):
        if lang:
            v = _get(lang)
            if v is not None:
                return v

    for v in titles.values():
        if isinstance(v, str) and v.strip():
            return v.strip()

    return str(getattr(item, "item_id", None) or getattr(item, "category_id", None) or "")


def resolve_translation(key: str, table: Optional[Mapping[str, Any]], fallback_text: str) -> str:
    if not table or not key:
        return fallback_text
    v = table.get(key)
    if isinstance(v, str) and v.strip():
        return v
    return fallback_text
