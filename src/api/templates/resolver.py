# src/api/templates/resolver.py
from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

from ..errors import ErrorCode, UnknownTheme
from ..models.menu import BusinessRecord
from ..text import norm_theme
from .registry import TemplateRegistry
from .types import ResolverState, ResolverStatus

logger = logging.getLogger("qr-menu")

Listener = Callable[[ResolverState], None]


class TemplateResolver:
    """
    Keeps exactly one active template per page view.

    State machine:
      Idle -> Resolving(theme) -> Active(unit) | Unresolved | Failed

    Every activate() takes a new token. A load that completes after a newer
    activate() was issued is dropped (last request wins, not last completion).
    Loads are never cancelled; staleness is checked when they finish.
    """

    def __init__(self, registry: TemplateRegistry):
        self.registry = registry
        self._state = ResolverState()
        self._token = 0
        self._business: Optional[BusinessRecord] = None
        self._listeners: List[Listener] = []

    @property
    def state(self) -> ResolverState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set(self, new: ResolverState) -> None:
        # single assignment: observers never see a half-updated state
        self._state = new
        for fn in list(self._listeners):
            fn(new)

    def _is_current(self, token: int) -> bool:
        return token == self._token

    async def activate(self, business: Optional[BusinessRecord]) -> ResolverState:
        self._business = business

        if business is None:
            self._token += 1
            if self._state.status != ResolverStatus.IDLE:
                self._set(ResolverState(token=self._token))
            return self._state

        theme = norm_theme(business.theme_id)
        cur = self._state
        if cur.status == ResolverStatus.ACTIVE and cur.theme_id == theme:
            return cur

        self._token += 1
        token = self._token

        if not theme:
            logger.info("[resolver] %s has no theme; no template", business.slug)
            self._set(ResolverState(
                status=ResolverStatus.UNRESOLVED,
                error=ErrorCode.UNKNOWN_THEME,
                detail="missing theme",
                token=token,
            ))
            return self._state

        try:
            loader = self.registry.resolve(theme)
        except UnknownTheme as e:
            logger.info("[resolver] %s: %s", business.slug, e)
            self._set(ResolverState(
                status=ResolverStatus.UNRESOLVED,
                theme_id=theme,
                error=e.code,
                detail=str(e),
                token=token,
            ))
            return self._state

        self._set(ResolverState(status=ResolverStatus.RESOLVING, theme_id=theme, token=token))

        try:
            unit = await loader()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not self._is_current(token):
                logger.debug("[resolver] stale load for %r failed (token=%s): %s", theme, token, e)
                return self._state
            logger.warning("[resolver] template load failed for theme %r: %s", theme, e)
            self._set(ResolverState(
                status=ResolverStatus.FAILED,
                theme_id=theme,
                error=ErrorCode.TEMPLATE_LOAD_FAILED,
                detail=f"{type(e).__name__}: {e}",
                token=token,
            ))
            return self._state

        if not self._is_current(token):
            logger.debug("[resolver] dropping stale template %r (token=%s, current=%s)", theme, token, self._token)
            return self._state

        logger.info("[resolver] active template=%s theme=%r", getattr(unit, "name", "?"), theme)
        self._set(ResolverState(status=ResolverStatus.ACTIVE, theme_id=theme, unit=unit, token=token))
        return self._state

    def fail(self, detail: str = "timeout") -> ResolverState:
        """
        Force a pending resolution to Failed (e.g. caller-side timeout).
        The pending load becomes stale and its result is ignored.
        """
        cur = self._state
        if cur.status != ResolverStatus.RESOLVING:
            return cur
        self._token += 1
        self._set(ResolverState(
            status=ResolverStatus.FAILED,
            theme_id=cur.theme_id,
            error=ErrorCode.TEMPLATE_LOAD_FAILED,
            detail=detail,
            token=self._token,
        ))
        return self._state

    async def retry(self) -> ResolverState:
        if self._state.status == ResolverStatus.ACTIVE:
            return self._state
        # drop the Failed/Unresolved marker so the same theme is re-attempted
        self._set(ResolverState(token=self._token))
        return await self.activate(self._business)
