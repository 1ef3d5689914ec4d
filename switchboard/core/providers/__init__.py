"""Provider resolution: request URL, credentials and headers."""

from __future__ import annotations

from switchboard.core.providers.errors import MissingCredentialError, ProviderMappedError
from switchboard.core.providers.request import build_headers, build_request
from switchboard.core.providers.resolver import (
    CUSTOM_HEADERS_ENV_VAR,
    build_full_url,
    parse_header_block,
    resolve_api_key,
    resolve_custom_headers,
    substitute_env_vars,
)

__all__ = [
    "CUSTOM_HEADERS_ENV_VAR",
    "MissingCredentialError",
    "ProviderMappedError",
    "build_full_url",
    "build_headers",
    "build_request",
    "parse_header_block",
    "resolve_api_key",
    "resolve_custom_headers",
    "substitute_env_vars",
]
