from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..errors import UnsupportedCurrency, UnsupportedLanguage
from ..text import norm_code, norm_theme


class DiscountKind(str, Enum):
    PERCENT = "percent"
    AMOUNT = "amount"


_DISCOUNT_KIND_ALIASES = {
    "percent": DiscountKind.PERCENT,
    "percentage": DiscountKind.PERCENT,
    "%": DiscountKind.PERCENT,
    "amount": DiscountKind.AMOUNT,
    "absolute": DiscountKind.AMOUNT,
    "fixed": DiscountKind.AMOUNT,
}


def to_decimal(v: Any) -> Optional[Decimal]:
    """
    Numbers from JSON arrive as int/float/str; go through str() so
    10.1 becomes Decimal("10.1") and not its binary expansion.
    """
    if v is None or isinstance(v, bool):
        return None
    try:
        d = Decimal(str(v).strip())
    except (InvalidOperation, ValueError):
        return None
    if not d.is_finite():
        return None
    return d


def _localized(v: Any) -> Dict[str, str]:
    # {"en": "Soup", "nl": "Soep"} or a bare "Soup" (treated as language-less "")
    if isinstance(v, dict):
        out: Dict[str, str] = {}
        for k, s in v.items():
            if s is None:
                continue
            out[norm_code(str(k))] = str(s).strip()
        return out
    if isinstance(v, str) and v.strip():
        return {"": v.strip()}
    return {}


def _str_tuple(v: Any, *, upper: bool = False) -> Tuple[str, ...]:
    out: List[str] = []
    for x in (v or []):
        s = norm_code(str(x), upper=upper)
        if s and s not in out:
            out.append(s)
    return tuple(out)


@dataclass(frozen=True)
class Discount:
    kind: DiscountKind
    value: Decimal

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Discount"]:
        if not isinstance(data, dict):
            return None
        kind = _DISCOUNT_KIND_ALIASES.get(str(data.get("type") or data.get("kind") or "").strip().lower())
        value = to_decimal(data.get("value"))
        if kind is None or value is None or value < 0:
            return None
        return cls(kind=kind, value=value)


@dataclass(frozen=True)
class ThemeColors:
    primary: str = "#000000"
    secondary: str = "#ffffff"


@dataclass(frozen=True)
class BusinessRecord:
    slug: str
    theme_id: str
    name: str
    colors: ThemeColors = field(default_factory=ThemeColors)
    languages: Tuple[str, ...] = ("en",)
    currencies: Tuple[str, ...] = ("USD",)
    default_language: str = "en"
    default_currency: str = "USD"
    flags: Mapping[str, bool] = field(default_factory=dict)
    logo: Optional[str] = None

    @property
    def theme_key(self) -> str:
        return norm_theme(self.theme_id)

    def supports_language(self, code: str) -> bool:
        return norm_code(code) in self.languages

    def supports_currency(self, code: str) -> bool:
        return norm_code(code, upper=True) in self.currencies

    def require_language(self, code: str) -> str:
        lang = norm_code(code)
        if lang not in self.languages:
            raise UnsupportedLanguage(f"{self.slug} does not offer language {lang!r}")
        return lang

    def require_currency(self, code: str) -> str:
        cur = norm_code(code, upper=True)
        if cur not in self.currencies:
            raise UnsupportedCurrency(f"{self.slug} does not price in {cur!r}")
        return cur

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BusinessRecord":
        colors = data.get("colors") or {}
        languages = _str_tuple(data.get("languages")) or ("en",)
        currencies = _str_tuple(data.get("currencies"), upper=True) or ("USD",)

        # declared default wins only when it is actually supported
        default_language = norm_code(str(data.get("default_language") or ""))
        if default_language not in languages:
            default_language = languages[0]
        default_currency = norm_code(str(data.get("default_currency") or ""), upper=True)
        if default_currency not in currencies:
            default_currency = currencies[0]

        flags = data.get("subscription") or data.get("flags") or {}

        return cls(
            slug=str(data.get("slug") or "").strip(),
            theme_id=str(data.get("theme") or data.get("template") or "").strip(),
            name=str(data.get("name") or data.get("slug") or "").strip(),
            colors=ThemeColors(
                primary=str(colors.get("primary") or ThemeColors.primary),
                secondary=str(colors.get("secondary") or ThemeColors.secondary),
            ),
            languages=languages,
            currencies=currencies,
            default_language=default_language,
            default_currency=default_currency,
            flags={str(k): bool(v) for k, v in flags.items()} if isinstance(flags, dict) else {},
            logo=(str(data["logo"]).strip() or None) if data.get("logo") else None,
        )


def _id_str(v: Any) -> Optional[str]:
    # ids may be integers; 0 is a real id
    if v is None:
        return None
    return str(v).strip() or None


@dataclass(frozen=True)
class CategoryRecord:
    category_id: str
    names: Dict[str, str]
    order: int = 0

    @property
    def titles(self) -> Dict[str, str]:
        return self.names

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CategoryRecord":
        try:
            order = int(data.get("order") or 0)
        except (TypeError, ValueError):
            order = 0
        return cls(
            category_id=_id_str(data.get("id")) or "",
            names=_localized(data.get("name") if "name" in data else data.get("names")),
            order=order,
        )


@dataclass(frozen=True)
class ItemRecord:
    item_id: str
    titles: Dict[str, str]
    prices: Dict[str, Decimal]
    discount: Optional[Discount] = None
    image: Optional[str] = None
    category_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ItemRecord":
        prices: Dict[str, Decimal] = {}
        raw_prices = data.get("prices") or {}
        if isinstance(raw_prices, dict):
            for cur, amount in raw_prices.items():
                d = to_decimal(amount)
                if d is not None and d >= 0:
                    prices[norm_code(str(cur), upper=True)] = d

        cat = data.get("category_id", data.get("category"))
        return cls(
            item_id=_id_str(data.get("id")) or "",
            titles=_localized(data.get("titles") if "titles" in data else data.get("title")),
            prices=prices,
            discount=Discount.from_dict(data.get("discount")),
            image=(str(data.get("image") or "").strip() or None),
            category_id=_id_str(cat),
        )


@dataclass
class FavoriteEntry:
    item_id: str
    titles: Dict[str, str]
    prices: Dict[str, Decimal]
    discount: Optional[Discount] = None
    image: Optional[str] = None
    quantity: int = 1

    @classmethod
    def from_item(cls, item: ItemRecord, quantity: int = 1) -> "FavoriteEntry":
        return cls(
            item_id=item.item_id,
            titles=dict(item.titles),
            prices=dict(item.prices),
            discount=item.discount,
            image=item.image,
            quantity=quantity,
        )


@dataclass(frozen=True)
class SocialLink:
    kind: str
    url: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SocialLink":
        return cls(
            kind=str(data.get("type") or data.get("kind") or "link").strip().lower(),
            url=str(data.get("url") or "").strip(),
        )


@dataclass(frozen=True)
class OpeningHours:
    day: str
    opens: Optional[str] = None
    closes: Optional[str] = None
    closed: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OpeningHours":
        return cls(
            day=str(data.get("day") or "").strip().lower(),
            opens=(str(data.get("opens") or "").strip() or None),
            closes=(str(data.get("closes") or "").strip() or None),
            closed=bool(data.get("closed", False)),
        )


def sort_categories(categories: List[CategoryRecord]) -> List[CategoryRecord]:
    # sorted() is stable: equal ordering keys keep backend order
    return sorted(categories, key=lambda c: c.order)
