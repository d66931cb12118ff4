"""Manages environment and configuration value lookups."""

import os
import re

from dotenv import load_dotenv
from triggerscale.constants import ENV_PREFIX

_ENV_PATTERN = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>[^}]*))?\}")

def load_env(path=".env"):
    """Loads a dotenv file into the process environment without overriding existing values."""

    return load_dotenv(path, override=False)

def resolve_env_variables(value):
    """
    Recursively substitutes `${VAR}` and `${VAR:-default}` references in strings,
    lists and mappings with values from the environment.
    Unset variables without a default are left untouched.
    """

    if isinstance(value, dict):
        return {k: resolve_env_variables(v) for k, v in value.items()}
    if isinstance(value, list):
        return [resolve_env_variables(v) for v in value]
    if not isinstance(value, str):
        return value

    def _replace(match):
        default = match.group("default")
        return os.getenv(match.group("name"), default if default is not None else match.group(0))

    return _ENV_PATTERN.sub(_replace, value)

def get_config(config_name: str, cls: object = None, default=None):
    """Retrieves a configuration value from environment variables or a class attribute."""

    # Try to get the value from environment variables.
    ret = os.getenv(f"{ENV_PREFIX}{config_name.upper()}")

    # If the environment variable exists, return it.
    if ret is not None:
        return ret

    # If no class is provided, return the default value.
    if cls is None:
        return default

    # Try to get the value from the class attribute, or return the default if it doesn't exist.
    return getattr(cls, config_name.lower(), default)
