"""Logging helpers for environment scopes."""

from temp_env_vars.logging.formatters import ScopeFormatter

__all__ = ["ScopeFormatter"]
