# src/api/preferences.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import ErrorCode, UnsupportedCurrency, UnsupportedLanguage
from .formatting import resolve_translation
from .models.menu import BusinessRecord, CategoryRecord, ThemeColors
from .text import norm_code

logger = logging.getLogger("qr-menu")

ALL_CATEGORIES = "all"


@dataclass(frozen=True)
class GlobalPreferences:
    language: str
    currency: str
    category_filter: str = ALL_CATEGORIES
    translations: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    colors: ThemeColors = field(default_factory=ThemeColors)
    flags: Mapping[str, bool] = field(default_factory=dict)

    @property
    def table(self) -> Mapping[str, str]:
        """Translation table for the selected language."""
        return self.translations.get(self.language) or {}


@dataclass(frozen=True)
class PreferenceResult:
    value: str
    accepted: bool = True
    error: Optional[ErrorCode] = None


Listener = Callable[[GlobalPreferences], None]


class GlobalPreferencesStore:
    """
    Display preferences shared by whatever template is mounted.

    Each setter touches exactly one field. Values are checked against the
    business's supported sets once a BusinessRecord is attached; before that
    they are accepted provisionally and re-checked by attach_business().
    Unsupported values never raise: they fall back to the business default
    and the result carries the error code.
    """

    def __init__(self, default_language: str = "en", default_currency: str = "USD"):
        self._business: Optional[BusinessRecord] = None
        self._category_ids: Optional[Tuple[str, ...]] = None
        self._listeners: List[Listener] = []
        self._state = GlobalPreferences(
            language=norm_code(default_language) or "en",
            currency=norm_code(default_currency, upper=True) or "USD",
        )

    # -------------------------
    # Read
    # -------------------------
    def get(self) -> GlobalPreferences:
        return self._state

    @property
    def business(self) -> Optional[BusinessRecord]:
        return self._business

    def translate(self, key: str, fallback_text: str) -> str:
        return resolve_translation(key, self._state.table, fallback_text)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # -------------------------
    # Mutate
    # -------------------------
    def _commit(self, **changes) -> None:
        new = replace(self._state, **changes)
        if new == self._state:
            return
        self._state = new
        for fn in list(self._listeners):
            fn(new)

    def _check_language(self, code: str) -> PreferenceResult:
        b = self._business
        if b is None:
            return PreferenceResult(value=code)
        try:
            return PreferenceResult(value=b.require_language(code))
        except UnsupportedLanguage as e:
            logger.info("[prefs] %s; using %s", e, b.default_language)
            return PreferenceResult(value=b.default_language, accepted=False, error=e.code)

    def _check_currency(self, code: str) -> PreferenceResult:
        b = self._business
        if b is None:
            return PreferenceResult(value=code)
        try:
            return PreferenceResult(value=b.require_currency(code))
        except UnsupportedCurrency as e:
            logger.info("[prefs] %s; using %s", e, b.default_currency)
            return PreferenceResult(value=b.default_currency, accepted=False, error=e.code)

    def _check_category(self, cid: str) -> PreferenceResult:
        if cid == ALL_CATEGORIES or self._category_ids is None or cid in self._category_ids:
            return PreferenceResult(value=cid)
        return PreferenceResult(value=ALL_CATEGORIES, accepted=False)

    def set_language(self, code: str) -> PreferenceResult:
        res = self._check_language(norm_code(code))
        self._commit(language=res.value)
        return res

    def set_currency(self, code: str) -> PreferenceResult:
        res = self._check_currency(norm_code(code, upper=True))
        self._commit(currency=res.value)
        return res

    def set_category_filter(self, id_or_all: Optional[str]) -> PreferenceResult:
        cid = str(id_or_all or "").strip() or ALL_CATEGORIES
        if cid.lower() == ALL_CATEGORIES:
            cid = ALL_CATEGORIES
        res = self._check_category(cid)
        self._commit(category_filter=res.value)
        return res

    def set_translations(self, tables: Mapping[str, Mapping[str, str]]) -> None:
        normed: Dict[str, Dict[str, str]] = {}
        for lang, table in (tables or {}).items():
            if isinstance(table, Mapping):
                normed[norm_code(str(lang))] = {str(k): str(v) for k, v in table.items() if v is not None}
        self._commit(translations=normed)

    def set_categories(self, categories: Iterable[CategoryRecord]) -> None:
        self._category_ids = tuple(c.category_id for c in categories)
        res = self._check_category(self._state.category_filter)
        self._commit(category_filter=res.value)

    def attach_business(self, business: BusinessRecord) -> Tuple[PreferenceResult, PreferenceResult]:
        """
        Make the business's supported sets known and re-validate the
        provisional language/currency against them. Colors and flags
        come from the record.
        """
        if self._business is not None and self._business.slug != business.slug:
            # category ids belong to the previous business
            self._category_ids = None
        self._business = business
        lang = self._check_language(self._state.language)
        cur = self._check_currency(self._state.currency)
        self._commit(
            language=lang.value,
            currency=cur.value,
            colors=business.colors,
            flags=dict(business.flags),
        )
        return lang, cur
