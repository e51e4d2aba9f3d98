from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from jsonschema import Draft202012Validator

SCHEMAS_DIR = Path(__file__).resolve().parent / "schemas"


@lru_cache(maxsize=None)
def load_schema(rel_path: str) -> dict:
    p = SCHEMAS_DIR / rel_path
    if not p.exists():
        raise FileNotFoundError(f"Schema not found: {p}")
    return json.loads(p.read_text(encoding="utf-8"))


def validate_payload(schema_rel_path: str, payload: object) -> None:
    schema = load_schema(schema_rel_path)
    Draft202012Validator(schema).validate(payload)
