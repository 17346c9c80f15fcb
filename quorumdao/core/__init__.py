"""Core configuration for quorumdao."""

from __future__ import annotations

from .config import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
