"""Global constants for temp_env_vars.

Environment variable names and built-in defaults used by the settings
loader and the scope guard.
"""

from enum import Enum


class Default(Enum):
    """Marker for scope arguments that fall back to the loaded settings."""

    SETTINGS = "settings"


FROM_SETTINGS = Default.SETTINGS
"""Default for TempEnvScope timeout, distinct from None which waits forever."""

CONFIG_PATH_ENV_VAR = "TEMP_ENV_VARS_CONFIG"
"""Environment variable pointing at the YAML settings file."""

DEFAULT_CONFIG_PATH = "temp_env_vars.yaml"
"""Settings file looked up in the working directory when no path is given."""

CONFIG_SECTION = "temp_env_vars"
"""Optional top-level section holding the settings inside the YAML file.

Allows the settings to live in a shared YAML file next to other tools'
configuration.
"""

BLOCKING_ENV_VAR = "TEMP_ENV_VARS_BLOCKING"
"""Environment override for whether scope construction waits for the token."""

TIMEOUT_ENV_VAR = "TEMP_ENV_VARS_TIMEOUT"
"""Environment override for the token wait timeout in seconds."""

DEFAULT_BLOCKING = True
"""Scopes wait for the token by default.

Parallel tests queue up behind each other in request order instead of
failing.
"""

DEFAULT_TIMEOUT_SECONDS = None
"""No timeout on token acquisition by default.

A stuck guarded span blocks later ones indefinitely unless a timeout is
configured.
"""

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
FALSE_VALUES = frozenset({"0", "false", "no", "off"})
NONE_VALUES = frozenset({"", "none", "null"})

PYTEST_MARKER = "temp_env_vars"
"""Name of the pytest marker that wraps a test in a scope."""
