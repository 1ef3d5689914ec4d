"""Resolve request URL, API key and headers for a model provider.

Every function here is a read-only projection of a ``ModelProviderInfo`` and
an ``EnvironmentReader``. Nothing is cached, so changes to the environment
between calls are observed.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from switchboard.core.config import ModelProviderInfo, WireApi
from switchboard.core.openai_api_key import OPENAI_API_KEY_ENV_VAR, get_openai_api_key
from switchboard.core.providers.errors import MissingCredentialError
from switchboard.utils.env import EnvironmentReader, default_environment
from switchboard.utils.log import get_logger

logger = get_logger()

# Newline-separated `Name: Value` lines applied to every provider.
CUSTOM_HEADERS_ENV_VAR = "SWITCHBOARD_CUSTOM_HEADERS"

_PLACEHOLDER_OPEN = "${"
_PLACEHOLDER_CLOSE = "}"

PrimaryKeyLookup = Callable[[], Optional[str]]


def build_full_url(provider: ModelProviderInfo) -> str:
    """Return ``base_url`` + wire API suffix + raw query string."""
    query_string = ""
    if provider.query_params:
        query_string = "?" + "&".join(f"{k}={v}" for k, v in provider.query_params.items())

    base_url = provider.base_url
    if provider.wire_api is WireApi.RESPONSES:
        return f"{base_url}/responses{query_string}"
    if provider.wire_api is WireApi.CHAT:
        return f"{base_url}/chat/completions{query_string}"
    raise ValueError(f"Unsupported wire API: {provider.wire_api!r}")


def resolve_api_key(
    provider: ModelProviderInfo,
    env: Optional[EnvironmentReader] = None,
    primary_key_lookup: Optional[PrimaryKeyLookup] = None,
) -> Optional[str]:
    """Return the provider's API key, or None if it needs no credential.

    Blank values count as missing. ``OPENAI_API_KEY`` additionally falls back
    to ``primary_key_lookup`` (the process-local key slot by default).
    """
    env_key = provider.env_key
    if env_key is None:
        return None

    if env is None:
        env = default_environment()
    value = env.get(env_key)
    if _is_blank(value) and env_key == OPENAI_API_KEY_ENV_VAR:
        lookup = primary_key_lookup or get_openai_api_key
        value = lookup()
        if not _is_blank(value):
            logger.debug("[providers] Using stored primary API key", extra={"env_key": env_key})

    if value is None or not value.strip():
        logger.debug(
            "[providers] API key missing",
            extra={"provider": provider.name, "env_key": env_key},
        )
        raise MissingCredentialError(env_key, provider.env_key_instructions)
    return value


def resolve_custom_headers(
    provider: ModelProviderInfo,
    env: Optional[EnvironmentReader] = None,
) -> Dict[str, str]:
    """Merge provider headers with the process-wide header block.

    Provider headers are inserted first and the block from
    ``SWITCHBOARD_CUSTOM_HEADERS`` second, so the block wins on equal names.
    Placeholders are substituted in values from both sources.
    """
    if env is None:
        env = default_environment()
    headers: Dict[str, str] = {}

    if provider.custom_headers:
        for name, template in provider.custom_headers.items():
            headers[name] = substitute_env_vars(template, env)

    block = env.get(CUSTOM_HEADERS_ENV_VAR)
    if block:
        for name, template in parse_header_block(block):
            headers[name] = substitute_env_vars(template, env)

    return headers


def parse_header_block(block: str) -> List[Tuple[str, str]]:
    """Parse `Name: Value` lines, splitting on the first colon.

    Lines are split on ``\\n`` only, with a trailing ``\\r`` dropped. Lines
    without a colon, or with an empty name, are skipped.
    """
    entries: List[Tuple[str, str]] = []
    for raw_line in block.split("\n"):
        line = raw_line.rstrip("\r")
        name, sep, value = line.partition(":")
        if not sep:
            continue
        name = name.strip()
        if not name:
            continue
        entries.append((name, value.strip()))
    return entries


def substitute_env_vars(value: str, env: Optional[EnvironmentReader] = None) -> str:
    """Replace ``${NAME}`` placeholders with environment values.

    Unknown variables become empty strings (with a warning). An opening
    ``${`` without a closing brace ends the scan and is kept verbatim.
    Substituted text is not scanned again.
    """
    if env is None:
        env = default_environment()
    parts: List[str] = []
    pos = 0
    while True:
        start = value.find(_PLACEHOLDER_OPEN, pos)
        if start == -1:
            break
        name_start = start + len(_PLACEHOLDER_OPEN)
        end = value.find(_PLACEHOLDER_CLOSE, name_start)
        if end == -1:
            break

        var_name = value[name_start:end]
        replacement = env.get(var_name)
        if replacement is None:
            logger.warning(
                "Environment variable '%s' not found in custom header",
                var_name,
                extra={"variable": var_name},
            )
            replacement = ""
        parts.append(value[pos:start])
        parts.append(replacement)
        pos = end + len(_PLACEHOLDER_CLOSE)

    parts.append(value[pos:])
    return "".join(parts)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


__all__ = [
    "CUSTOM_HEADERS_ENV_VAR",
    "build_full_url",
    "parse_header_block",
    "resolve_api_key",
    "resolve_custom_headers",
    "substitute_env_vars",
]
