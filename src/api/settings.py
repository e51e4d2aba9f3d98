from __future__ import annotations

import os


def _get_bool(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "y", "on")


def _get_int(name: str, default: str) -> int:
    return int(os.getenv(name, default).strip() or default)


def _get_float(name: str, default: str) -> float:
    return float(os.getenv(name, default).strip() or default)


def _get_str(name: str, default: str = "") -> str:
    return (os.getenv(name, default) or default).strip()


# --------------------------------------------------
# Logging
# --------------------------------------------------
LOG_LEVEL = _get_str("LOG_LEVEL", "INFO").upper()

# --------------------------------------------------
# Menu backend
# --------------------------------------------------
MENU_API_BASE_URL = _get_str("MENU_API_BASE_URL", "http://127.0.0.1:8080/api")
MENU_API_TIMEOUT_SEC = _get_float("MENU_API_TIMEOUT_SEC", "10.0")
FEEDBACK_ENABLED = _get_bool("FEEDBACK_ENABLED", "1")

# --------------------------------------------------
# Templates
# --------------------------------------------------
# empty -> built-in src/api/templates/templates.yaml
TEMPLATES_CONFIG = _get_str("TEMPLATES_CONFIG", "")
# a load that never settles is forced to Failed after this
TEMPLATE_LOAD_TIMEOUT_SEC = _get_float("TEMPLATE_LOAD_TIMEOUT_SEC", "5.0")
GRID_COLUMNS = _get_int("GRID_COLUMNS", "2")

# --------------------------------------------------
# Display defaults (before a business record is known)
# --------------------------------------------------
DEFAULT_LANGUAGE = _get_str("DEFAULT_LANGUAGE", "en").lower()
DEFAULT_CURRENCY = _get_str("DEFAULT_CURRENCY", "USD").upper()

# --------------------------------------------------
# Images
# --------------------------------------------------
IMAGE_BASE_URL = _get_str("IMAGE_BASE_URL", "")
FALLBACK_IMAGE_URL = _get_str("FALLBACK_IMAGE_URL", "/static/placeholder.png")
