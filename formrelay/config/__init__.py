"""
Configuration for the form relay engine.

Two layers:
- Settings: environment configuration (pydantic-settings, cached)
- RelayConfig: immutable per-call configuration of the orchestrator

Usage:
    from formrelay.config import get_settings, RelayConfig

    settings = get_settings()
    config = RelayConfig(create_children=False)
"""

from __future__ import annotations

from .errors import ConfigError, MissingKeyError, ValidationError
from .relay_config import DEFAULT_RELAY_CONFIG, BoardTarget, RelayConfig
from .settings import Settings, get_settings

__all__ = [
    "DEFAULT_RELAY_CONFIG",
    "BoardTarget",
    "RelayConfig",
    "Settings",
    "get_settings",
    # Error classes
    "ConfigError",
    "MissingKeyError",
    "ValidationError",
]
