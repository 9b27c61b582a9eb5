"""Shared application settings read from environment variables."""

import os
from collections.abc import Mapping

LOG_LEVEL: str = os.environ.get('LOG_LEVEL', 'INFO').upper()


class ConfigurationError(RuntimeError):
    """A required setting is missing or invalid."""


def require(name: str, environ: Mapping[str, str] | None = None) -> str:
    """Return a non-blank environment value or raise ConfigurationError."""
    env = os.environ if environ is None else environ
    value = env.get(name, '').strip()
    if not value:
        raise ConfigurationError(
            f'Missing required environment variable {name}. '
            'Please check your .env file.'
        )
    return value
