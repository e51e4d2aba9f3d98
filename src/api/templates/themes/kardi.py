# Kardi: category tabs on top, one section per category below.
from __future__ import annotations

from typing import Any, Dict, List

from ...formatting import resolve_title
from ...preferences import ALL_CATEGORIES
from ..types import TemplateContext, TemplateProps
from .base import build_sections, empty_state, page_header


class KardiTemplate:
    name = "kardi"

    def _tabs(self, props: TemplateProps, ctx: TemplateContext) -> List[Dict[str, Any]]:
        # tabs list every category regardless of the current filter
        prefs = ctx.preferences.get()
        tabs = [{
            "id": ALL_CATEGORIES,
            "title": ctx.preferences.translate("all", "All"),
            "active": prefs.category_filter == ALL_CATEGORIES,
        }]
        for c in props.categories or ():
            tabs.append({
                "id": c.category_id,
                "title": resolve_title(c, prefs.language, props.business.default_language),
                "active": prefs.category_filter == c.category_id,
            })
        return tabs

    def render(self, props: TemplateProps, ctx: TemplateContext) -> Dict[str, Any]:
        return {
            "template": self.name,
            "layout": "sections",
            "header": page_header(props, ctx),
            "tabs": self._tabs(props, ctx),
            "sections": build_sections(props, ctx),
            "empty": empty_state(props, ctx),
        }


TEMPLATE = KardiTemplate()
