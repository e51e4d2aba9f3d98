# src/api/errors.py
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    UNKNOWN_THEME = "UNKNOWN_THEME"
    TEMPLATE_LOAD_FAILED = "TEMPLATE_LOAD_FAILED"
    UNSUPPORTED_CURRENCY = "UNSUPPORTED_CURRENCY"
    UNSUPPORTED_LANGUAGE = "UNSUPPORTED_LANGUAGE"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    TEMPLATE_RENDER_FAILED = "TEMPLATE_RENDER_FAILED"


class MenuCoreError(Exception):
    """
    Base for the recoverable core failures.
    Core operations catch these locally and report `code` as state;
    they never unwind a render.
    """

    code: ErrorCode

    def __init__(self, message: str = "", *, detail: Optional[str] = None) -> None:
        super().__init__(message or self.code.value)
        self.detail = detail


class UnknownTheme(MenuCoreError):
    code = ErrorCode.UNKNOWN_THEME

    def __init__(self, theme_id: str) -> None:
        super().__init__(f"No template registered for theme {theme_id!r}")
        self.theme_id = theme_id


class TemplateLoadFailed(MenuCoreError):
    code = ErrorCode.TEMPLATE_LOAD_FAILED


class UnsupportedCurrency(MenuCoreError):
    code = ErrorCode.UNSUPPORTED_CURRENCY


class UnsupportedLanguage(MenuCoreError):
    code = ErrorCode.UNSUPPORTED_LANGUAGE


class InvalidQuantity(MenuCoreError):
    code = ErrorCode.INVALID_QUANTITY


class BackendError(Exception):
    """Transport/HTTP/payload failure talking to the menu backend."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def not_found(self) -> bool:
        return self.status_code == 404
