# src/api/templates/registry.py
from __future__ import annotations

import asyncio
import importlib
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..errors import TemplateLoadFailed, UnknownTheme
from ..text import norm_theme
from .types import TemplateLoader, TemplateUnit

logger = logging.getLogger("qr-menu")

BUILTIN_CONFIG = Path(__file__).resolve().parent / "templates.yaml"


def module_loader(target: str) -> TemplateLoader:
    """
    Lazy loader for "package.module:ATTR".

    The module is imported only when the loader is awaited, so templates
    nobody uses are never imported. importlib's module cache makes repeated
    calls return the same unit.
    """
    mod_path, _, attr = target.partition(":")
    attr = attr or "TEMPLATE"
    if not mod_path:
        raise ValueError(f"Bad template target {target!r}")

    async def _load() -> TemplateUnit:
        # import can touch disk; keep it off the event loop
        try:
            module = await asyncio.to_thread(importlib.import_module, mod_path)
        except ImportError as e:
            raise TemplateLoadFailed(f"cannot import {mod_path}: {e}") from e
        unit = getattr(module, attr, None)
        if not isinstance(unit, TemplateUnit):
            raise TemplateLoadFailed(f"{target} is not a template unit")
        return unit

    _load.__qualname__ = f"module_loader({target})"
    return _load


class TemplateRegistry:
    """
    theme id -> async loader.
    Keys are canonical (see text.norm_theme); lookups normalize the same way.
    """

    def __init__(self, loaders: Optional[Dict[str, TemplateLoader]] = None):
        self._loaders: Dict[str, TemplateLoader] = {}
        for k, v in (loaders or {}).items():
            self.register(k, v)

    def register(self, theme_id: str, loader: TemplateLoader) -> None:
        key = norm_theme(theme_id)
        if not key:
            raise ValueError("theme_id is empty")
        if key in self._loaders:
            logger.info("[registry] overwriting loader for theme %r", key)
        self._loaders[key] = loader

    def resolve(self, theme_id: str) -> TemplateLoader:
        key = norm_theme(theme_id)
        loader = self._loaders.get(key)
        if loader is None:
            raise UnknownTheme(key)
        return loader

    def themes(self) -> List[str]:
        return sorted(self._loaders)

    def __contains__(self, theme_id: object) -> bool:
        return isinstance(theme_id, str) and norm_theme(theme_id) in self._loaders

    def __len__(self) -> int:
        return len(self._loaders)


def _read_yaml(p: Path) -> Dict[str, Any]:
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    return data if isinstance(data, dict) else {}


def load_registry(path: Optional[str] = None) -> TemplateRegistry:
    """
    Build a registry from a YAML file:

        templates:
          kardi: src.api.templates.themes.kardi:TEMPLATE
          classic: src.api.templates.themes.classic
        aliases:
          default: classic
    """
    p = Path(path).resolve() if path else BUILTIN_CONFIG
    if not p.exists():
        raise FileNotFoundError(f"Missing {p}")

    data = _read_yaml(p)
    reg = TemplateRegistry()

    templates = data.get("templates") or {}
    for theme_id, target in templates.items():
        if not isinstance(target, str) or not target.strip():
            logger.warning("[registry] skipping theme %r: no target", theme_id)
            continue
        reg.register(str(theme_id), module_loader(target.strip()))

    aliases = data.get("aliases") or {}
    for alias, theme_id in aliases.items():
        try:
            reg.register(str(alias), reg.resolve(str(theme_id)))
        except UnknownTheme:
            logger.warning("[registry] alias %r points at unknown theme %r", alias, theme_id)

    logger.info("[registry] loaded %d themes from %s", len(reg), p.name)
    return reg
