"""
API key resolution utilities.

Resolves the API key from:
1. Explicit value
2. The ``ZAI_API_KEY`` environment variable
"""

from __future__ import annotations

import os

from zai_lib_python.errors import ValidationError

API_KEY_ENV = "ZAI_API_KEY"


def resolve_api_key(explicit_key: str | None = None) -> str | None:
    """Resolve the API key, or None if neither source provides one."""
    if explicit_key:
        return explicit_key
    return os.getenv(API_KEY_ENV) or None


def require_api_key(explicit_key: str | None = None) -> str:
    """Resolve the API key or fail.

    Raises:
        ValidationError: If no key is configured
    """
    key = resolve_api_key(explicit_key)
    if not key:
        raise ValidationError(
            "No API key configured",
            field="api_key",
        ).with_hint(f"Pass api_key or set {API_KEY_ENV}")
    return key


def get_auth_header(api_key: str) -> dict[str, str]:
    """Bearer authentication header for ``api_key``."""
    return {"Authorization": f"Bearer {api_key}"}
