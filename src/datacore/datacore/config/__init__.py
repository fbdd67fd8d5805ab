# ABOUTME: Configuration package initialization
# ABOUTME: Exports configuration classes and utilities for the datacore library

from datacore.config.settings import CoreSettings, get_settings
from datacore.config.provider import ProviderSettings
from datacore.config.logging import (
    LoggerConfig,
    LoggingSettings,
    setup_logging,
    get_logger,
    configure_for_testing,
)

__all__ = [
    "CoreSettings",
    "ProviderSettings",
    "get_settings",
    "LoggerConfig",
    "LoggingSettings",
    "setup_logging",
    "get_logger",
    "configure_for_testing",
]
