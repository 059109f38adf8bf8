"""Configuration utility for the PR reviewer.

This module provides centralized configuration management with:
- Environment variables as the only source
- Type-safe access to configuration values
"""

import os
from typing import Any

DEFAULT_BITBUCKET_API_BASE_URL = "https://api.bitbucket.org/2.0/repositories/"
DEFAULT_BITBUCKET_TIMEOUT_SECONDS = 30.0
DEFAULT_REVIEWER_MODEL = "o4-mini"


def parse_config_value(value: str) -> str | bool | int | float:
    if value.lower() == "true":
        return True
    elif value.lower() == "false":
        return False
    else:
        # Try to parse as a number
        try:
            return int(value)
        except ValueError:
            try:
                return float(value)
            except ValueError:
                # Return as string
                return value


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a configuration value from environment variables.

    Args:
        key: Configuration key name (e.g., "BITBUCKET_API_BASE_URL")
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    env_value = os.environ.get(key)
    if env_value is not None:
        return parse_config_value(env_value)

    return default


def get_config_value_str(key: str) -> str | None:
    """
    Get a configuration value from environment variables. But sometimes you just want a string.
    """
    return os.environ.get(key)


def get_bitbucket_access_token() -> str | None:
    """Get the Bitbucket access token from env.

    Read as a raw string so numeric-looking tokens are not coerced.
    """
    return get_config_value_str("BITBUCKET_ACCESS_TOKEN") or None


def get_bitbucket_api_base_url() -> str:
    """Get the Bitbucket repositories API base URL."""
    return get_config_value_str("BITBUCKET_API_BASE_URL") or DEFAULT_BITBUCKET_API_BASE_URL


def get_bitbucket_strict_status() -> bool:
    """Whether non-2xx Bitbucket responses raise instead of passing through as data."""
    return get_config_value("BITBUCKET_STRICT_STATUS", False) is True


def get_bitbucket_timeout_seconds() -> float:
    """Get the HTTP timeout used for Bitbucket requests."""
    value = get_config_value("BITBUCKET_TIMEOUT_SECONDS", DEFAULT_BITBUCKET_TIMEOUT_SECONDS)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"BITBUCKET_TIMEOUT_SECONDS must be a number, got {value!r}")
    return float(value)


def get_openai_api_key() -> str | None:
    """Get OpenAI API key from env."""
    return get_config_value_str("OPENAI_API_KEY")


def get_openai_base_url() -> str | None:
    """Get OpenAI base URL from env."""
    return get_config_value_str("OPENAI_BASE_URL")


def get_reviewer_model() -> str:
    """Get the model used by the code reviewer agent."""
    return get_config_value_str("REVIEWER_MODEL") or DEFAULT_REVIEWER_MODEL


def get_reviewer_environment() -> str:
    """Get reviewer environment from env var."""
    return get_config_value_str("REVIEWER_ENVIRONMENT") or "local"
