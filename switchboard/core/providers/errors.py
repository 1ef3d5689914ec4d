"""Provider error types with stable error codes."""

from __future__ import annotations

from typing import Optional


class ProviderMappedError(Exception):
    """Provider exception with a stable error code."""

    def __init__(self, error_code: str, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.retryable = retryable


class MissingCredentialError(ProviderMappedError):
    """A provider requires an API key that is absent or blank in the environment."""

    def __init__(self, variable_name: str, instructions: Optional[str] = None) -> None:
        message = f"Missing environment variable: `{variable_name}`."
        if instructions:
            message = f"{message} {instructions}"
        super().__init__("missing_credential", message)
        self.variable_name = variable_name
        self.instructions = instructions
