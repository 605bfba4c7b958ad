"""
Core application modules.

Dependencies live in ``keyword_strategy.app.core.dependencies`` and are not
re-exported here: they import the services, which import this package.
"""

from keyword_strategy.app.core.config import Settings, get_settings, settings

__all__ = [
    "Settings",
    "get_settings",
    "settings",
]
