"""Configuration module for conduit-testkit.

Usage:
    from conduit_testkit.config import get_settings

    settings = get_settings()  # Cached singleton
    print(settings.api_url)

Note:
    Settings are resolved once and threaded into providers through the
    provider context. Use `get_settings.cache_clear()` in tests that
    change the environment.
"""

from conduit_testkit.config.logging import configure_logging
from conduit_testkit.config.settings import Settings, get_settings

__all__ = ["Settings", "configure_logging", "get_settings"]
