# src/api/favorites.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Callable, List, Optional

from .errors import ErrorCode, InvalidQuantity
from .formatting import PriceResult, resolve_price
from .models.menu import FavoriteEntry, ItemRecord

logger = logging.getLogger("qr-menu")


@dataclass(frozen=True)
class FavoritesResult:
    ok: bool = True
    changed: bool = False
    error: Optional[ErrorCode] = None


Listener = Callable[[List[FavoriteEntry]], None]


class FavoritesStore:
    """
    Session-scoped favorites/cart.

    Policy: one entry per item id. Adding an item that is already present
    increments its quantity; count() is the sum of quantities. Quantities
    below 1 are rejected with INVALID_QUANTITY and leave the state untouched.
    """

    def __init__(self) -> None:
        self._entries: List[FavoriteEntry] = []
        self._listeners: List[Listener] = []

    def _find(self, item_id: str) -> Optional[FavoriteEntry]:
        for e in self._entries:
            if e.item_id == item_id:
                return e
        return None

    def _notify(self) -> None:
        snapshot = self.list()
        for fn in list(self._listeners):
            fn(snapshot)

    @staticmethod
    def _require_qty(quantity) -> int:
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise InvalidQuantity(f"quantity must be a whole number >= 1, got {quantity!r}")
        return quantity

    # -------------------------
    # Read
    # -------------------------
    def list(self) -> List[FavoriteEntry]:
        return [replace(e, titles=dict(e.titles), prices=dict(e.prices)) for e in self._entries]

    def count(self) -> int:
        return sum(e.quantity for e in self._entries)

    def contains(self, item_id: str) -> bool:
        return self._find(item_id) is not None

    def quantity_of(self, item_id: str) -> int:
        e = self._find(item_id)
        return e.quantity if e else 0

    def total(self, currency: str, default_currency: Optional[str] = None) -> PriceResult:
        """
        Sum of discounted line prices. Lines priced through a fallback
        currency other than the first line's are skipped and reported.
        """
        total = Decimal(0)
        used: Optional[str] = None
        fell_back = False
        for e in self._entries:
            p = resolve_price(e.prices, currency, e.discount, default_currency)
            if p.amount is None:
                continue
            if used is None:
                used = p.currency
            elif p.currency != used:
                logger.warning("[favorites] %s priced in %s, total is in %s; line skipped", e.item_id, p.currency, used)
                fell_back = True
                continue
            fell_back = fell_back or p.fallback_used
            total += p.amount * e.quantity
        if used is None:
            return PriceResult(amount=Decimal(0), currency=currency.upper() if currency else None)
        return PriceResult(
            amount=total,
            currency=used,
            fallback_used=fell_back,
            error=ErrorCode.UNSUPPORTED_CURRENCY if fell_back else None,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # -------------------------
    # Mutate
    # -------------------------
    def add(self, item: ItemRecord, quantity: int = 1) -> FavoritesResult:
        try:
            quantity = self._require_qty(quantity)
        except InvalidQuantity as e:
            logger.debug("[favorites] %s", e)
            return FavoritesResult(ok=False, error=e.code)
        existing = self._find(item.item_id)
        if existing is not None:
            existing.quantity += quantity
        else:
            self._entries.append(FavoriteEntry.from_item(item, quantity))
        self._notify()
        return FavoritesResult(changed=True)

    def remove(self, item_id: str) -> FavoritesResult:
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.item_id != item_id]
        if len(self._entries) == before:
            return FavoritesResult()
        self._notify()
        return FavoritesResult(changed=True)

    def set_quantity(self, item_id: str, quantity: int) -> FavoritesResult:
        try:
            quantity = self._require_qty(quantity)
        except InvalidQuantity as e:
            logger.debug("[favorites] %s", e)
            return FavoritesResult(ok=False, error=e.code)
        e = self._find(item_id)
        if e is None or e.quantity == quantity:
            return FavoritesResult()
        e.quantity = quantity
        self._notify()
        return FavoritesResult(changed=True)

    def clear(self) -> FavoritesResult:
        if not self._entries:
            return FavoritesResult()
        self._entries = []
        self._notify()
        return FavoritesResult(changed=True)
