"""Configuration package for StepAI Admin.

Re-exports the settings symbols so that callers can write::

    from stepai_admin.config import get_settings
"""

from __future__ import annotations

from stepai_admin.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
