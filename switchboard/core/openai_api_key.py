"""Process-local slot for the primary OpenAI API key.

Credential resolution checks the environment first. For ``OPENAI_API_KEY``
it then falls back to this slot, which a login flow can fill at runtime.
"""

from __future__ import annotations

import threading
from typing import Optional

OPENAI_API_KEY_ENV_VAR = "OPENAI_API_KEY"

_lock = threading.Lock()
_openai_api_key: Optional[str] = None


def get_openai_api_key() -> Optional[str]:
    """Return the key stored in the slot, if any."""
    with _lock:
        return _openai_api_key


def set_openai_api_key(value: str) -> None:
    """Store ``value`` as the primary key for this process."""
    global _openai_api_key
    with _lock:
        _openai_api_key = value


def clear_openai_api_key() -> None:
    global _openai_api_key
    with _lock:
        _openai_api_key = None
