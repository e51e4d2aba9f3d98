# src/api/server.py
"""
QR Menu - HTTP layer

server.py responsibilities:
- backend client lifecycle
- template registry load (once, at import)
- one MenuPageController per page request

All menu logic lives in the page controller and the core modules.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from ..utils.load_env import load_env

# IMPORTANT: must run before importing settings so env overrides are visible.
load_env()

# Centralized settings (single source of truth for env-driven config)
from . import settings  # noqa: E402
from .backend.client import MenuBackendClient  # noqa: E402
from .page_controller import MenuPageController, PageStatus  # noqa: E402
from .preferences import GlobalPreferencesStore  # noqa: E402
from .templates.registry import load_registry  # noqa: E402

# --------------------------------------------------
# Logging (configured once)
# --------------------------------------------------
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("qr-menu")


@asynccontextmanager
async def lifespan(app: FastAPI):
    global backend

    logger.info("[startup] MENU_API_BASE_URL=%s themes=%s", settings.MENU_API_BASE_URL, registry.themes())
    backend = MenuBackendClient(
        settings.MENU_API_BASE_URL,
        timeout_s=settings.MENU_API_TIMEOUT_SEC,
        feedback_enabled=settings.FEEDBACK_ENABLED,
    )

    # ---- application runs here ----
    try:
        yield
    finally:
        if backend:
            try:
                await backend.close()
            except Exception:
                logger.exception("Error while closing backend client")
        backend = None
        logger.info("Backend client closed")


# --------------------------------------------------
# App globals
# --------------------------------------------------
app = FastAPI(title="QR Menu", lifespan=lifespan)
registry = load_registry(settings.TEMPLATES_CONFIG or None)
backend: Optional[MenuBackendClient] = None


def get_backend() -> MenuBackendClient:
    if backend is None:
        raise HTTPException(status_code=503, detail="Menu backend not configured")
    return backend


def new_page(client: MenuBackendClient) -> MenuPageController:
    return MenuPageController(
        client=client,
        registry=registry,
        preferences=GlobalPreferencesStore(settings.DEFAULT_LANGUAGE, settings.DEFAULT_CURRENCY),
        template_timeout_s=settings.TEMPLATE_LOAD_TIMEOUT_SEC,
    )


# --------------------------------------------------
# Routes
# --------------------------------------------------
@app.get("/")
async def root() -> Dict[str, Any]:
    return {"ok": True, "service": "qr-menu"}


@app.get("/templates")
async def templates() -> Dict[str, Any]:
    return {"themes": registry.themes()}


@app.get("/menu/{slug}")
async def menu_page(
    slug: str,
    lang: Optional[str] = Query(default=None),
    currency: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    client: MenuBackendClient = Depends(get_backend),
) -> JSONResponse:
    page = new_page(client)

    # provisional until the business record arrives; re-validated on load
    if lang:
        page.preferences.set_language(lang)
    if currency:
        page.preferences.set_currency(currency)
    if category:
        page.preferences.set_category_filter(category)

    try:
        data = await page.load(slug)
        if data.status == PageStatus.NOT_FOUND:
            raise HTTPException(status_code=404, detail=f"Business not found: {slug}")
        if data.status == PageStatus.ERROR:
            raise HTTPException(status_code=502, detail=f"Menu backend error: {data.error}")
        return JSONResponse(page.render())
    finally:
        page.close()


@app.post("/menu/{slug}/feedback", status_code=202)
async def menu_feedback(
    slug: str,
    payload: Dict[str, Any] = Body(...),
    client: MenuBackendClient = Depends(get_backend),
) -> Dict[str, Any]:
    client.submit_feedback(slug, payload)
    return {"accepted": True}
