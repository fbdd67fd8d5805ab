# ABOUTME: Core exception classes for the entity data-access layer
# ABOUTME: Provides structured error handling with context and error codes

from typing import Dict, Any


class CoreException(Exception):
    """Base exception class for the data-access layer.

    Provides structured error handling with optional error codes and contextual
    details. All custom exceptions in the package inherit from this class
    to ensure consistent error handling patterns.

    Attributes:
        message: Human-readable error message
        code: Optional error code for programmatic handling
        details: Optional dictionary containing contextual information
    """

    def __init__(self, message: str, code: str | None = None, details: Dict[str, Any] | None = None):
        """Initialize CoreException with message, optional code and details.

        Args:
            message: Human-readable error message
            code: Optional error code for programmatic handling
            details: Optional dictionary containing contextual information
        """
        self.message = message
        self.code = code
        self.details = details.copy() if details else {}
        super().__init__(self.message)


class ValidationException(CoreException):
    """Exception raised for invalid caller input.

    Used when arguments are structurally unusable, such as:
    - Empty or malformed entity paths
    - Path segments that are blank after trimming

    Conversion of raw objects never raises this; converters report absence instead.
    """

    pass


class ConfigurationException(CoreException):
    """Exception raised for configuration errors.

    Used when the wiring of providers and converters is invalid, such as:
    - Duplicate type keys in a converter registry
    - Unknown identifier generator strategies

    Should include details about the configuration issue.
    """

    pass


class StorageError(CoreException):
    """Exception raised for storage operation failures.

    Used when the backing store cannot serve a request, such as:
    - Provider already closed
    - Storage capacity limits exceeded

    Should include details about the storage operation that failed.
    """

    pass


class StreamClosedError(CoreException):
    """Exception raised when a producer pushes into a terminated stream.

    A stream terminates once it completes or fails; emitting afterwards
    is a producer bug.
    """

    pass
