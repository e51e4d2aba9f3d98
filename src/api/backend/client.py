# src/api/backend/client.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Set
from urllib.parse import quote

import httpx
from jsonschema import ValidationError

from ..errors import BackendError
from ..models.menu import (
    BusinessRecord,
    CategoryRecord,
    ItemRecord,
    OpeningHours,
    SocialLink,
    sort_categories,
)
from .contract_validate import validate_payload

logger = logging.getLogger("qr-menu")


def _path(slug: str, suffix: str = "") -> str:
    return f"/business/{quote(slug, safe='')}{suffix}"


def _unwrap_list(data: Any) -> List[Dict[str, Any]]:
    # backend returns either a bare list or {"data": [...]}
    if isinstance(data, dict):
        data = data.get("data", data.get("results"))
    if not isinstance(data, list):
        return []
    return [x for x in data if isinstance(x, dict)]


class MenuBackendClient:
    """
    Thin async client for the menu backend.

    Reads raise BackendError on transport/HTTP/payload problems; the page
    controller decides what is fatal. submit_feedback() is fire-and-forget
    and never raises.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 10.0,
        http: Optional[httpx.AsyncClient] = None,
        feedback_enabled: bool = True,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(base_url=self.base_url, timeout=timeout_s)
        self._feedback_enabled = feedback_enabled
        self._pending: Set[asyncio.Task] = set()

    async def close(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        if self._owns_http:
            await self.http.aclose()

    async def _get_json(self, path: str) -> Any:
        try:
            r = await self.http.get(path)
        except httpx.HTTPError as e:
            logger.warning("[backend] GET %s failed: %s", path, e)
            raise BackendError(f"GET {path} failed: {e}") from e
        if r.status_code >= 400:
            raise BackendError(f"GET {path} -> HTTP {r.status_code}", status_code=r.status_code)
        try:
            return r.json()
        except ValueError as e:
            raise BackendError(f"GET {path} returned invalid JSON", status_code=r.status_code) from e

    # -------------------------
    # Reads
    # -------------------------
    async def get_business(self, slug: str) -> BusinessRecord:
        data = await self._get_json(_path(slug))
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = data["data"]
        try:
            validate_payload("business.schema.json", data)
        except ValidationError as e:
            raise BackendError(f"business payload for {slug!r} invalid: {e.message}") from e
        return BusinessRecord.from_dict(data)

    async def get_categories(self, slug: str) -> List[CategoryRecord]:
        rows = _unwrap_list(await self._get_json(_path(slug, "/categories")))
        cats = [CategoryRecord.from_dict(r) for r in rows]
        return sort_categories([c for c in cats if c.category_id])

    async def get_items(self, slug: str) -> List[ItemRecord]:
        out: List[ItemRecord] = []
        for r in _unwrap_list(await self._get_json(_path(slug, "/items"))):
            try:
                validate_payload("item.schema.json", r)
            except ValidationError as e:
                logger.warning("[backend] skipping item %r for %s: %s", r.get("id"), slug, e.message)
                continue
            out.append(ItemRecord.from_dict(r))
        return out

    async def get_socials(self, slug: str) -> List[SocialLink]:
        rows = _unwrap_list(await self._get_json(_path(slug, "/socials")))
        return [s for s in (SocialLink.from_dict(r) for r in rows) if s.url]

    async def get_hours(self, slug: str) -> List[OpeningHours]:
        rows = _unwrap_list(await self._get_json(_path(slug, "/hours")))
        return [h for h in (OpeningHours.from_dict(r) for r in rows) if h.day]

    async def get_translations(self, slug: str) -> Dict[str, Dict[str, str]]:
        """qr_languages: {lang: {key: text}}"""
        data = await self._get_json(_path(slug, "/qr_languages"))
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = data["data"]
        if not isinstance(data, dict):
            return {}
        out: Dict[str, Dict[str, str]] = {}
        for lang, table in data.items():
            if isinstance(table, dict):
                out[str(lang)] = {str(k): str(v) for k, v in table.items() if v is not None}
        return out

    # -------------------------
    # Feedback (fire-and-forget)
    # -------------------------
    def submit_feedback(self, slug: str, payload: Dict[str, Any]) -> None:
        """Must never raise."""
        if not self._feedback_enabled:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("[backend] no running loop, feedback dropped")
            return

        task = loop.create_task(self._post_feedback(slug, dict(payload or {})))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _post_feedback(self, slug: str, payload: Dict[str, Any]) -> None:
        path = _path(slug, "/feedback")
        try:
            r = await self.http.post(path, json=payload)
            if r.status_code >= 400:
                logger.warning("[backend] feedback for %s -> HTTP %s", slug, r.status_code)
        except Exception:
            logger.debug("[backend] feedback post failed for %s", slug, exc_info=True)
