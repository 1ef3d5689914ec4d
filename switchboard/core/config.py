"""Configuration management for Switchboard.

Providers can be defined in two places:
  1. Built-in defaults shipped with the package so it works out of the box.
  2. User-defined entries in ``~/.switchboard.json`` under the
     ``model_providers`` key. These override or extend the defaults at runtime.
"""

import json
import os
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, Dict, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from switchboard.utils.log import get_logger

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from switchboard.utils.env import EnvironmentReader


logger = get_logger()

CONFIG_PATH_ENV_VAR = "SWITCHBOARD_CONFIG"
DEFAULT_PROVIDER_ID = "openai"


class WireApi(str, Enum):
    """Wire protocol a provider speaks.

    Most third-party services only implement the Chat Completions schema,
    while OpenAI also exposes the Responses API. The two use different
    request/response shapes and cannot be detected at runtime, so every
    provider declares one.
    """

    RESPONSES = "responses"
    CHAT = "chat"

    @classmethod
    def _missing_(cls, value: object) -> Optional["WireApi"]:
        """Accept values regardless of case and surrounding whitespace."""
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class ModelProviderInfo(BaseModel):
    """Connection profile for one OpenAI-compatible provider."""

    model_config = ConfigDict(frozen=True)

    # Friendly display name.
    name: str = Field(min_length=1)
    # Base URL of the OpenAI-compatible API, used as-is.
    base_url: str
    # Environment variable that stores the API key. None means no auth.
    env_key: Optional[str] = None
    # Help text shown when the key is missing.
    env_key_instructions: Optional[str] = None
    wire_api: WireApi = WireApi.CHAT
    query_params: Optional[Dict[str, str]] = None
    # Values may contain ${VAR_NAME} placeholders.
    custom_headers: Optional[Dict[str, str]] = None

    @field_validator("query_params", "custom_headers", mode="after")
    @classmethod
    def _freeze_mapping(cls, value: Optional[Dict[str, str]]) -> Optional[Mapping[str, str]]:
        """Store mappings read-only so a profile cannot change after construction."""
        if value is None:
            return None
        return MappingProxyType(dict(value))

    @field_serializer("query_params", "custom_headers")
    def _serialize_mapping(self, value: Optional[Mapping[str, str]]) -> Optional[Dict[str, str]]:
        if value is None:
            return None
        return dict(value)

    def get_full_url(self) -> str:
        """Return the request URL for this provider's wire API."""
        from switchboard.core.providers.resolver import build_full_url

        return build_full_url(self)

    def api_key(
        self,
        env: Optional["EnvironmentReader"] = None,
        primary_key_lookup: Optional[Callable[[], Optional[str]]] = None,
    ) -> Optional[str]:
        """Return the API key, or None when the provider needs no auth.

        Raises MissingCredentialError when ``env_key`` is set but the variable
        is absent or blank.
        """
        from switchboard.core.providers.resolver import resolve_api_key

        return resolve_api_key(self, env=env, primary_key_lookup=primary_key_lookup)

    def get_custom_headers(self, env: Optional["EnvironmentReader"] = None) -> Dict[str, str]:
        """Return custom headers with ${VAR} placeholders substituted."""
        from switchboard.core.providers.resolver import resolve_custom_headers

        return resolve_custom_headers(self, env=env)


def built_in_model_providers() -> Dict[str, ModelProviderInfo]:
    """Built-in default provider list.

    Only OpenAI ships by default; other providers are added by users under
    ``model_providers``.
    """
    return {
        DEFAULT_PROVIDER_ID: ModelProviderInfo(
            name="OpenAI",
            base_url="https://api.openai.com/v1",
            env_key="OPENAI_API_KEY",
            env_key_instructions=(
                "Create an API key (https://platform.openai.com) and export it "
                "as an environment variable."
            ),
            wire_api=WireApi.RESPONSES,
        ),
    }


class GlobalConfig(BaseModel):
    """Global configuration stored in ~/.switchboard.json"""

    model_config = {"protected_namespaces": (), "populate_by_name": True}

    # Key of the provider used by default.
    model_provider: str = DEFAULT_PROVIDER_ID
    # User-defined providers, keyed by provider id.
    model_providers: Dict[str, ModelProviderInfo] = Field(default_factory=dict)


def default_config_path() -> Path:
    override = os.environ.get(CONFIG_PATH_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".switchboard.json"


class ConfigManager:
    """Loads, merges and persists provider configuration."""

    def __init__(self, config_path: Optional[Path] = None) -> None:
        self._config_path = config_path
        self._loaded_path: Optional[Path] = None
        self._global_config: Optional[GlobalConfig] = None

    @property
    def global_config_path(self) -> Path:
        """Explicit path if given, else resolved from the environment on each access."""
        return self._config_path or default_config_path()

    @global_config_path.setter
    def global_config_path(self, path: Path) -> None:
        self._config_path = path

    def get_global_config(self) -> GlobalConfig:
        """Load and return global configuration."""
        # Reset cached config when the config path changes
        if self._loaded_path != self.global_config_path:
            self._global_config = None
        if self._global_config is None:
            self._loaded_path = self.global_config_path
            if self.global_config_path.exists():
                try:
                    data = json.loads(self.global_config_path.read_text(encoding="utf-8"))
                    self._global_config = GlobalConfig(**data)
                    logger.debug(
                        "[config] Loaded global configuration",
                        extra={
                            "path": str(self.global_config_path),
                            "provider_count": len(self._global_config.model_providers),
                        },
                    )
                except (
                    json.JSONDecodeError,
                    OSError,
                    UnicodeDecodeError,
                    ValidationError,
                    ValueError,
                    TypeError,
                ) as e:
                    logger.warning(
                        "Error loading global config: %s: %s",
                        type(e).__name__,
                        e,
                        extra={"error": str(e), "path": str(self.global_config_path)},
                    )
                    self._global_config = GlobalConfig()
            else:
                self._global_config = GlobalConfig()
                logger.debug(
                    "[config] Global config not found; using defaults",
                    extra={"path": str(self.global_config_path)},
                )
        return self._global_config

    def save_global_config(self, config: GlobalConfig) -> None:
        """Save global configuration."""
        self._global_config = config
        self._loaded_path = self.global_config_path
        self.global_config_path.parent.mkdir(parents=True, exist_ok=True)
        self.global_config_path.write_text(
            config.model_dump_json(indent=2, exclude_none=True), encoding="utf-8"
        )
        logger.debug(
            "[config] Saved global configuration",
            extra={
                "path": str(self.global_config_path),
                "provider_count": len(config.model_providers),
                "model_provider": config.model_provider,
            },
        )

    def get_model_providers(self) -> Dict[str, ModelProviderInfo]:
        """Built-in providers merged with user entries; user entries win."""
        providers = built_in_model_providers()
        for key, info in self.get_global_config().model_providers.items():
            if key in providers:
                logger.debug("[config] User provider overrides built-in", extra={"provider": key})
            providers[key] = info
        return providers

    def get_model_provider(self, key: str) -> ModelProviderInfo:
        providers = self.get_model_providers()
        if key not in providers:
            known = ", ".join(sorted(providers))
            raise KeyError(f"Unknown model provider '{key}'. Known providers: {known}")
        return providers[key]

    def get_selected_provider(self) -> ModelProviderInfo:
        """Return the provider named by ``model_provider``."""
        return self.get_model_provider(self.get_global_config().model_provider)

    def is_user_defined(self, key: str) -> bool:
        return key in self.get_global_config().model_providers

    def add_model_provider(
        self,
        key: str,
        info: ModelProviderInfo,
        overwrite: bool = False,
    ) -> GlobalConfig:
        """Add or replace a user-defined provider and persist the update."""
        config = self.get_global_config()
        if not overwrite and key in config.model_providers:
            raise ValueError(f"Model provider '{key}' already exists.")

        config.model_providers[key] = info
        self.save_global_config(config)
        return config

    def delete_model_provider(self, key: str) -> GlobalConfig:
        """Delete a user-defined provider and repair the selection if needed."""
        config = self.get_global_config()
        if key not in config.model_providers:
            raise KeyError(f"Model provider '{key}' is not user-defined.")

        del config.model_providers[key]
        if config.model_provider == key and key not in built_in_model_providers():
            config.model_provider = DEFAULT_PROVIDER_ID

        self.save_global_config(config)
        return config

    def set_model_provider(self, key: str) -> GlobalConfig:
        """Select the provider used by default."""
        if key not in self.get_model_providers():
            raise ValueError(f"Model provider '{key}' does not exist.")

        config = self.get_global_config()
        config.model_provider = key
        self.save_global_config(config)
        return config


# Global instance
config_manager = ConfigManager()


def get_global_config() -> GlobalConfig:
    """Get global configuration."""
    return config_manager.get_global_config()


def save_global_config(config: GlobalConfig) -> None:
    """Save global configuration."""
    config_manager.save_global_config(config)


def get_model_providers() -> Dict[str, ModelProviderInfo]:
    """Get built-in and user-defined providers."""
    return config_manager.get_model_providers()


def get_model_provider(key: str) -> ModelProviderInfo:
    """Look up one provider by key."""
    return config_manager.get_model_provider(key)


def add_model_provider(key: str, info: ModelProviderInfo, overwrite: bool = False) -> GlobalConfig:
    """Add or replace a user-defined provider and persist the update."""
    return config_manager.add_model_provider(key, info, overwrite=overwrite)


def delete_model_provider(key: str) -> GlobalConfig:
    """Remove a user-defined provider."""
    return config_manager.delete_model_provider(key)


def set_model_provider(key: str) -> GlobalConfig:
    """Select the default provider."""
    return config_manager.set_model_provider(key)
