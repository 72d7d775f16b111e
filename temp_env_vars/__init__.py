"""Scoped, self-restoring environment variables for tests.

Every change to environment variables made while a scope is active is
reverted when the scope ends::

    from temp_env_vars import TempEnvScope, temp_env_vars

    @temp_env_vars
    def test_some():
        os.environ["FOO"] = "BAR"

    def test_other():
        with TempEnvScope():
            os.environ["FOO"] = "BAR"
        # FOO is unset again here

Only one scope is active per process at a time; others wait their turn in
request order.
"""

from __future__ import annotations

from temp_env_vars.config import ScopeSettings, SettingsLoader, get_settings, reset_settings
from temp_env_vars.decorator import temp_env_vars
from temp_env_vars.exceptions import (
    RestorationError,
    ScopeContentionError,
    ScopeContentionTimeoutError,
    TempEnvError,
)
from temp_env_vars.scope import TempEnvScope
from temp_env_vars.snapshot import EnvChanges, EnvSnapshot

__version__ = "0.1.0"

__all__ = [
    "EnvChanges",
    "EnvSnapshot",
    "RestorationError",
    "ScopeContentionError",
    "ScopeContentionTimeoutError",
    "ScopeSettings",
    "SettingsLoader",
    "TempEnvError",
    "TempEnvScope",
    "get_settings",
    "reset_settings",
    "temp_env_vars",
]
