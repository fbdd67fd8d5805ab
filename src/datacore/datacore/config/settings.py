# ABOUTME: Main configuration composition for the application.
# ABOUTME: Assembles all configuration classes into a single, accessible object.

from functools import lru_cache

from ._base import BaseCoreSettings
from .provider import ProviderSettings


class CoreSettings(BaseCoreSettings, ProviderSettings):
    """Represents the complete, composed configuration for the application.

    This class acts as the final aggregator for all configuration settings.
    It inherits from `BaseCoreSettings` for foundational settings and from
    `ProviderSettings` for identifier generation and storage limits.

    Each configuration module stays self-contained, while the application
    sees a single, unified settings object.

    The `get_settings` function provides a singleton instance of this class.
    """

    pass


@lru_cache
def get_settings() -> CoreSettings:
    """Provides a singleton instance of the application settings.

    This function uses a cache (`lru_cache`) so that the settings object is
    instantiated only once, which keeps environment parsing out of hot paths
    and guarantees a consistent configuration state across the application.

    Returns:
        A single, cached instance of the CoreSettings class.
    """
    return CoreSettings()
