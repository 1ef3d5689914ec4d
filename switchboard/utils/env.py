"""Environment variable access used by provider resolution.

Resolution code never touches ``os.environ`` directly. It receives an
``EnvironmentReader`` so callers (and tests) decide where values come from.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional, Protocol


class EnvironmentReader(Protocol):
    """Read-only lookup of environment variables by name."""

    def get(self, name: str) -> Optional[str]: ...


class ProcessEnvironment:
    """Reads the live process environment on every lookup."""

    def get(self, name: str) -> Optional[str]:
        return os.environ.get(name)

    def __repr__(self) -> str:
        return "ProcessEnvironment()"


class MappingEnvironment:
    """Environment backed by a fixed mapping."""

    def __init__(self, values: Optional[Mapping[str, str]] = None) -> None:
        self._values = dict(values or {})

    def get(self, name: str) -> Optional[str]:
        return self._values.get(name)

    def __repr__(self) -> str:
        return f"MappingEnvironment(keys={sorted(self._values)})"


def default_environment() -> EnvironmentReader:
    return ProcessEnvironment()
