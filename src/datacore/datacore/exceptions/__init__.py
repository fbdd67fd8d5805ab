# ABOUTME: Exceptions package exports
# ABOUTME: Exports the structured exception hierarchy of the data-access layer

from datacore.exceptions.base import (
    CoreException,
    ValidationException,
    ConfigurationException,
    StorageError,
    StreamClosedError,
)

__all__ = [
    "CoreException",
    "ValidationException",
    "ConfigurationException",
    "StorageError",
    "StreamClosedError",
]
