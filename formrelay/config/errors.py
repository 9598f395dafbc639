"""Configuration error classes.

All config-related exceptions for fast-fail behavior.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class MissingKeyError(ConfigError):
    """Raised when a required setting is not set."""

    pass


class ValidationError(ConfigError):
    """Raised when a config value fails validation."""

    pass
