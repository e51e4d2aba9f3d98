# src/api/backend/__init__.py
from .client import MenuBackendClient
from .contract_validate import validate_payload

__all__ = ["MenuBackendClient", "validate_payload"]
