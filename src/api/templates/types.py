from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Sequence, runtime_checkable

from ..errors import ErrorCode
from ..favorites import FavoritesStore
from ..models.menu import BusinessRecord, CategoryRecord, ItemRecord, OpeningHours, SocialLink
from ..preferences import GlobalPreferencesStore


@dataclass(frozen=True)
class TemplateProps:
    """The fixed inputs every template unit receives."""
    business: BusinessRecord
    categories: Optional[Sequence[CategoryRecord]] = None
    items: Optional[Sequence[ItemRecord]] = None
    items_loading: bool = False
    on_home: Callable[[], None] = lambda: None

    # pass-through business extras (empty when the backend had none)
    socials: Sequence[SocialLink] = ()
    hours: Sequence[OpeningHours] = ()


@dataclass(frozen=True)
class TemplateContext:
    """Shared state handles. Templates read and mutate state only through these."""
    preferences: GlobalPreferencesStore
    favorites: FavoritesStore


@runtime_checkable
class TemplateUnit(Protocol):
    name: str

    def render(self, props: TemplateProps, ctx: TemplateContext) -> Dict[str, Any]:
        ...


TemplateLoader = Callable[[], Awaitable[TemplateUnit]]


class ResolverStatus(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    ACTIVE = "active"
    UNRESOLVED = "unresolved"  # no template for this theme
    FAILED = "failed"          # loader errored / timed out


@dataclass(frozen=True)
class ResolverState:
    status: ResolverStatus = ResolverStatus.IDLE
    theme_id: Optional[str] = None
    unit: Optional[TemplateUnit] = None
    error: Optional[ErrorCode] = None
    detail: str = ""
    token: int = 0

    @property
    def is_active(self) -> bool:
        return self.status == ResolverStatus.ACTIVE and self.unit is not None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "theme": self.theme_id,
            "template": getattr(self.unit, "name", None),
            "error": self.error.value if self.error else None,
            "detail": self.detail,
        }
