"""
API settings access.

The API shares the engine's pydantic-settings model; this module keeps the
`from .settings import get_settings` import used across the API package.
"""

from __future__ import annotations

from formrelay.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
