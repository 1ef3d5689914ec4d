"""Pytest configuration and fixtures for all tests."""

import pytest

from switchboard.core import openai_api_key
from switchboard.core.config import CONFIG_PATH_ENV_VAR
from switchboard.core.providers.resolver import CUSTOM_HEADERS_ENV_VAR


@pytest.fixture(autouse=True)
def isolate_provider_environment(monkeypatch, tmp_path):
    """Keep host credentials, header overrides and config out of every test.

    The stored primary key is cleared before and after each test so a value
    set by one test never leaks into another.
    """
    monkeypatch.delenv(openai_api_key.OPENAI_API_KEY_ENV_VAR, raising=False)
    monkeypatch.delenv(CUSTOM_HEADERS_ENV_VAR, raising=False)
    monkeypatch.setenv(CONFIG_PATH_ENV_VAR, str(tmp_path / "switchboard.json"))
    openai_api_key.clear_openai_api_key()

    yield

    openai_api_key.clear_openai_api_key()
