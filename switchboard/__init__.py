"""
Switchboard - Model Provider Registry

Resolves connection details for OpenAI-compatible model providers.

Features:
- Built-in and user-defined provider profiles
- Request URL construction for the Responses and Chat Completions APIs
- API key lookup from the environment
- Custom headers with ${VAR} substitution

Quick Start:
    pip install -e .
    switchboard providers list
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
