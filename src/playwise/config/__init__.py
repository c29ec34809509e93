"""Configuration module for Playwise.

Usage:
    from playwise.config import get_settings

    settings = get_settings()  # Cached singleton
    print(settings.base_url)

Note:
    The env file is chosen from PLAYWISE_ENV (``environment/.env.<env>``),
    layered over a plain ``.env``.
"""

from playwise.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
