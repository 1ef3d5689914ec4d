"""Build outbound HTTP requests for a model provider.

The request is constructed but never sent; transport, retries and streaming
belong to the caller's HTTP client.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from switchboard.core.config import ModelProviderInfo
from switchboard.core.providers.resolver import (
    PrimaryKeyLookup,
    build_full_url,
    resolve_api_key,
    resolve_custom_headers,
)
from switchboard.utils.env import EnvironmentReader, default_environment
from switchboard.utils.log import get_logger
from switchboard.utils.user_agent import build_user_agent

logger = get_logger()


def build_headers(
    provider: ModelProviderInfo,
    *,
    env: Optional[EnvironmentReader] = None,
    primary_key_lookup: Optional[PrimaryKeyLookup] = None,
    user_agent: Optional[str] = None,
) -> httpx.Headers:
    """Default headers, bearer auth, then custom headers.

    Names match case-insensitively, so a custom header replaces any default
    header of the same name regardless of case.
    """
    if env is None:
        env = default_environment()
    headers = httpx.Headers(
        {
            "Content-Type": "application/json",
            "User-Agent": user_agent or build_user_agent(),
        }
    )
    api_key = resolve_api_key(provider, env=env, primary_key_lookup=primary_key_lookup)
    if api_key is not None:
        headers["Authorization"] = f"Bearer {api_key}"
    for name, value in resolve_custom_headers(provider, env=env).items():
        headers[name] = value
    return headers


def build_request(
    provider: ModelProviderInfo,
    payload: Dict[str, Any],
    *,
    env: Optional[EnvironmentReader] = None,
    primary_key_lookup: Optional[PrimaryKeyLookup] = None,
    user_agent: Optional[str] = None,
) -> httpx.Request:
    """Return a POST request carrying ``payload`` as JSON.

    Raises MissingCredentialError if the provider's API key cannot be found.
    """
    url = build_full_url(provider)
    headers = build_headers(
        provider,
        env=env,
        primary_key_lookup=primary_key_lookup,
        user_agent=user_agent,
    )
    logger.debug(
        "[providers] Built request",
        extra={
            "provider": provider.name,
            "wire_api": provider.wire_api.value,
            "url": url,
            "header_names": sorted(headers.keys()),
        },
    )
    return httpx.Request("POST", url, headers=headers, json=payload)
