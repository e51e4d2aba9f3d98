# Classic: a single scrolling list with category headings inline.
from __future__ import annotations

from typing import Any, Dict, List

from ..types import TemplateContext, TemplateProps
from .base import build_sections, empty_state, page_header


class ClassicTemplate:
    name = "classic"

    def render(self, props: TemplateProps, ctx: TemplateContext) -> Dict[str, Any]:
        rows: List[Dict[str, Any]] = []
        for s in build_sections(props, ctx):
            if not s["items"]:
                continue
            rows.append({"type": "heading", "id": s["id"], "title": s["title"]})
            rows.extend({"type": "item", **it} for it in s["items"])
        return {
            "template": self.name,
            "layout": "list",
            "header": page_header(props, ctx),
            "rows": rows,
            "empty": empty_state(props, ctx),
        }


TEMPLATE = ClassicTemplate()
