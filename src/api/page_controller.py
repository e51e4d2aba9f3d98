# src/api/page_controller.py
"""
Menu page composition.

responsibilities:
- fetch business / categories / items (+ socials, hours, translations)
- drive the TemplateResolver for the business's theme
- hand the active template its props plus the two shared stores

The stores outlive template swaps; only page teardown clears favorites.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Dict, List, Optional, TypeVar

from .backend.client import MenuBackendClient
from .errors import BackendError, ErrorCode
from .favorites import FavoritesStore
from .models.menu import BusinessRecord, CategoryRecord, ItemRecord, OpeningHours, SocialLink
from .preferences import ALL_CATEGORIES, GlobalPreferencesStore
from .templates.registry import TemplateRegistry
from .templates.resolver import TemplateResolver
from .templates.types import ResolverState, ResolverStatus, TemplateContext, TemplateProps

logger = logging.getLogger("qr-menu")

T = TypeVar("T")


class PageStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass
class PageData:
    slug: str = ""
    business: Optional[BusinessRecord] = None
    categories: List[CategoryRecord] = field(default_factory=list)
    items: List[ItemRecord] = field(default_factory=list)
    socials: List[SocialLink] = field(default_factory=list)
    hours: List[OpeningHours] = field(default_factory=list)
    items_loading: bool = False
    status: PageStatus = PageStatus.IDLE
    error: str = ""


class MenuPageController:
    def __init__(
        self,
        *,
        client: MenuBackendClient,
        registry: TemplateRegistry,
        preferences: Optional[GlobalPreferencesStore] = None,
        favorites: Optional[FavoritesStore] = None,
        template_timeout_s: Optional[float] = None,
    ) -> None:
        self.client = client
        self.resolver = TemplateResolver(registry)
        self.preferences = preferences or GlobalPreferencesStore()
        self.favorites = favorites or FavoritesStore()
        self.template_timeout_s = template_timeout_s
        self.page = PageData()
        self._load_token = 0

    @property
    def context(self) -> TemplateContext:
        return TemplateContext(preferences=self.preferences, favorites=self.favorites)

    def go_home(self) -> None:
        self.preferences.set_category_filter(ALL_CATEGORIES)

    # -------------------------
    # Loading
    # -------------------------
    async def _optional(self, what: str, fetch: Awaitable[T], default: T) -> T:
        try:
            return await fetch
        except BackendError as e:
            logger.warning("[page] %s unavailable for %s: %s", what, self.page.slug, e)
            return default

    async def _activate(self, business: Optional[BusinessRecord]) -> ResolverState:
        if not self.template_timeout_s:
            return await self.resolver.activate(business)
        try:
            return await asyncio.wait_for(self.resolver.activate(business), self.template_timeout_s)
        except asyncio.TimeoutError:
            logger.warning("[page] template load timed out after %.1fs", self.template_timeout_s)
            return self.resolver.fail(f"timeout after {self.template_timeout_s}s")

    async def load(self, slug: str) -> PageData:
        """
        (Re)load everything for `slug`. A newer load() makes this one stale:
        its results are not written to the page.
        """
        slug = (slug or "").strip()
        self._load_token += 1
        token = self._load_token

        if slug != self.page.slug:
            self.page = PageData(slug=slug)
        self.page.status = PageStatus.LOADING
        self.page.items_loading = True

        try:
            business = await self.client.get_business(slug)
        except BackendError as e:
            if token != self._load_token:
                return self.page
            self.page.status = PageStatus.NOT_FOUND if e.not_found else PageStatus.ERROR
            self.page.error = str(e)
            self.page.items_loading = False
            await self.resolver.activate(None)
            logger.warning("[page] business %r: %s", slug, e)
            return self.page

        if token != self._load_token:
            return self.page

        self.page.business = business
        self.preferences.attach_business(business)

        _state, categories, items, socials, hours, translations = await asyncio.gather(
            self._activate(business),
            self._optional("categories", self.client.get_categories(slug), []),
            self._optional("items", self.client.get_items(slug), []),
            self._optional("socials", self.client.get_socials(slug), []),
            self._optional("hours", self.client.get_hours(slug), []),
            self._optional("translations", self.client.get_translations(slug), {}),
        )

        if token != self._load_token:
            logger.debug("[page] dropping stale load for %r", slug)
            return self.page

        self.page.categories = categories
        self.page.items = items
        self.page.socials = socials
        self.page.hours = hours
        self.page.items_loading = False
        self.page.status = PageStatus.READY
        self.preferences.set_categories(categories)
        self.preferences.set_translations(translations)
        return self.page

    async def refresh_business(self) -> ResolverState:
        """
        Re-fetch the business for the current slug (theme may have changed)
        and re-run resolution. Page data other than the record is kept.
        """
        slug = self.page.slug
        if not slug:
            return self.resolver.state
        try:
            business = await self.client.get_business(slug)
        except BackendError as e:
            logger.warning("[page] refresh of %r failed: %s", slug, e)
            return self.resolver.state
        if slug != self.page.slug:
            return self.resolver.state
        self.page.business = business
        self.preferences.attach_business(business)
        return await self._activate(business)

    async def retry_template(self) -> ResolverState:
        return await self.resolver.retry()

    def close(self) -> None:
        """Page teardown: the cart does not outlive the page."""
        self.favorites.clear()

    # -------------------------
    # Rendering
    # -------------------------
    def props(self) -> Optional[TemplateProps]:
        b = self.page.business
        if b is None:
            return None
        return TemplateProps(
            business=b,
            categories=self.page.categories,
            items=self.page.items,
            items_loading=self.page.items_loading,
            on_home=self.go_home,
            socials=self.page.socials,
            hours=self.page.hours,
        )

    def render(self) -> Dict[str, Any]:
        st = self.resolver.state
        tpl = st.as_dict()
        out: Dict[str, Any] = {
            "slug": self.page.slug,
            "status": self.page.status.value,
            "template_status": tpl["status"],
            "theme": tpl["theme"],
            "template": tpl["template"],
            "error": tpl["error"],
            "detail": tpl["detail"] or self.page.error,
            "page": None,
        }

        props = self.props()
        if props is None or not st.is_active:
            return out

        try:
            out["page"] = st.unit.render(props, self.context)
        except Exception as e:
            logger.exception("[page] template %s failed to render", tpl["template"])
            out["template_status"] = ResolverStatus.FAILED.value
            out["error"] = ErrorCode.TEMPLATE_RENDER_FAILED.value
            out["detail"] = f"{type(e).__name__}: {e}"
        return out
