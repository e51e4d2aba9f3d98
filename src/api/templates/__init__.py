# src/api/templates/__init__.py
from .types import (
    ResolverState,
    ResolverStatus,
    TemplateContext,
    TemplateLoader,
    TemplateProps,
    TemplateUnit,
)
from .registry import TemplateRegistry, load_registry, module_loader
from .resolver import TemplateResolver

__all__ = [
    "ResolverState",
    "ResolverStatus",
    "TemplateContext",
    "TemplateLoader",
    "TemplateProps",
    "TemplateUnit",
    "TemplateRegistry",
    "load_registry",
    "module_loader",
    "TemplateResolver",
]
