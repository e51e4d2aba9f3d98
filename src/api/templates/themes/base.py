from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ... import settings
from ...formatting import format_price, resolve_image, resolve_price, resolve_title
from ...models.menu import CategoryRecord, ItemRecord
from ...preferences import ALL_CATEGORIES
from ..types import TemplateContext, TemplateProps

UNCATEGORIZED = "_other"


def item_view(item: ItemRecord, props: TemplateProps, ctx: TemplateContext) -> Dict[str, Any]:
    prefs = ctx.preferences.get()
    b = props.business
    price = resolve_price(item.prices, prefs.currency, item.discount, b.default_currency)
    base = resolve_price(item.prices, prefs.currency, None, b.default_currency)
    return {
        "id": item.item_id,
        "title": resolve_title(item, prefs.language, b.default_language),
        "price": str(price.amount) if price.amount is not None else None,
        "price_label": format_price(price),
        "original_price": str(base.amount) if item.discount and base.amount is not None else None,
        "currency": price.currency,
        "image": resolve_image(item.image, settings.FALLBACK_IMAGE_URL, settings.IMAGE_BASE_URL or None),
        "favorite_qty": ctx.favorites.quantity_of(item.item_id),
    }


def build_sections(props: TemplateProps, ctx: TemplateContext) -> List[Dict[str, Any]]:
    """
    Items grouped under their category, in category order, honoring the
    selected category filter. Items pointing at an unknown category land in
    a trailing "other" section so nothing silently disappears.
    """
    prefs = ctx.preferences.get()
    categories: Sequence[CategoryRecord] = props.categories or ()
    items: Sequence[ItemRecord] = props.items or ()

    known = {c.category_id for c in categories}
    by_cat: Dict[str, List[ItemRecord]] = {}
    for it in items:
        key = it.category_id if it.category_id in known else UNCATEGORIZED
        by_cat.setdefault(key, []).append(it)

    selected = prefs.category_filter
    sections: List[Dict[str, Any]] = []
    for c in categories:
        if selected != ALL_CATEGORIES and c.category_id != selected:
            continue
        sections.append({
            "id": c.category_id,
            "title": resolve_title(c, prefs.language, props.business.default_language),
            "items": [item_view(it, props, ctx) for it in by_cat.get(c.category_id, [])],
        })

    if selected == ALL_CATEGORIES and by_cat.get(UNCATEGORIZED):
        sections.append({
            "id": UNCATEGORIZED,
            "title": ctx.preferences.translate("other", "Other"),
            "items": [item_view(it, props, ctx) for it in by_cat[UNCATEGORIZED]],
        })
    return sections


def page_header(props: TemplateProps, ctx: TemplateContext) -> Dict[str, Any]:
    prefs = ctx.preferences.get()
    b = props.business
    logo: Optional[str] = resolve_image(b.logo, settings.FALLBACK_IMAGE_URL, settings.IMAGE_BASE_URL or None)
    return {
        "name": b.name,
        "logo": logo,
        "colors": {"primary": prefs.colors.primary, "secondary": prefs.colors.secondary},
        "language": prefs.language,
        "languages": list(b.languages),
        "currency": prefs.currency,
        "currencies": list(b.currencies),
        "category_filter": prefs.category_filter,
        "favorites_count": ctx.favorites.count(),
        "socials": [{"type": s.kind, "url": s.url} for s in props.socials],
        "hours": [
            {"day": h.day, "opens": h.opens, "closes": h.closes, "closed": h.closed}
            for h in props.hours
        ],
    }


def empty_state(props: TemplateProps, ctx: TemplateContext) -> Optional[Dict[str, Any]]:
    """Loading / empty marker, or None when there is something to show."""
    if props.items_loading:
        return {"state": "loading", "message": ctx.preferences.translate("loading", "Loading menu…")}
    if not props.items:
        return {"state": "empty", "message": ctx.preferences.translate("empty_menu", "No items yet")}
    return None
