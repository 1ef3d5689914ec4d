"""Shared helpers: logging, environment access, user agent."""
