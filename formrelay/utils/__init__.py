"""Shared utilities."""

from __future__ import annotations

from .path_security import UnsafePathError, safe_join, sanitize_filename

__all__ = ["UnsafePathError", "safe_join", "sanitize_filename"]
