"""User-Agent generation for Switchboard API requests.

Format: switchboard/{version} (external, {source})

Examples:
- CLI: switchboard/0.1.0 (external, cli)
- Library: switchboard/0.1.0 (external, lib)
"""

from __future__ import annotations

import os
from typing import Literal

from switchboard import __version__

UserAgentSource = Literal["cli", "lib"]

SWITCHBOARD_CLIENT_SOURCE_ENV = "SWITCHBOARD_CLIENT_SOURCE"

DEFAULT_SOURCE: UserAgentSource = "lib"


def get_client_source() -> UserAgentSource:
    """Get the client source type from environment or default."""
    source = os.environ.get(SWITCHBOARD_CLIENT_SOURCE_ENV, "").lower()
    if source == "cli":
        return "cli"
    return DEFAULT_SOURCE


def build_user_agent(source: UserAgentSource | None = None) -> str:
    """Build the User-Agent header value.

    Args:
        source: Optional source type override. If not provided, uses the
                environment variable or defaults to "lib".
    """
    if source is None:
        source = get_client_source()
    return f"switchboard/{__version__} (external, {source})"
