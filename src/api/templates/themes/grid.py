# Grid: image cards, fixed column count per row.
from __future__ import annotations

from typing import Any, Dict, List

from ... import settings
from ..types import TemplateContext, TemplateProps
from .base import build_sections, empty_state, page_header


def _chunk(seq: List[Dict[str, Any]], n: int) -> List[List[Dict[str, Any]]]:
    n = max(1, n)
    return [seq[i:i + n] for i in range(0, len(seq), n)]


class GridTemplate:
    name = "grid"

    def __init__(self, columns: int = 2):
        self.columns = columns

    def render(self, props: TemplateProps, ctx: TemplateContext) -> Dict[str, Any]:
        sections = []
        for s in build_sections(props, ctx):
            sections.append({"id": s["id"], "title": s["title"], "rows": _chunk(s["items"], self.columns)})
        return {
            "template": self.name,
            "layout": "grid",
            "columns": self.columns,
            "header": page_header(props, ctx),
            "sections": sections,
            "empty": empty_state(props, ctx),
        }


TEMPLATE = GridTemplate(columns=settings.GRID_COLUMNS)
