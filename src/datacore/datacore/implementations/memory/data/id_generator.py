# ABOUTME: Identifier generator implementations for newly created entities
# ABOUTME: Provides random UUID and deterministic sequential strategies plus a settings-driven factory

import threading
import uuid

from datacore.config import ProviderSettings, get_settings
from datacore.exceptions import ConfigurationException
from datacore.interfaces.data.id_generator import AbstractIdGenerator


class UuidIdGenerator(AbstractIdGenerator[str]):
    """Generates random identifiers as 32-character UUID4 hex strings."""

    def generate(self) -> str:
        return uuid.uuid4().hex


class SequentialIdGenerator(AbstractIdGenerator[str]):
    """
    Generates increasing identifiers such as `task-0001`, `task-0002`.

    Useful where identifiers must be predictable, e.g. in tests and fixtures.
    Thread-safe.
    """

    def __init__(self, prefix: str = "", start: int = 1, width: int = 0):
        """
        Initialize the sequential generator.

        Args:
            prefix: Text prepended to every identifier.
            start: The first counter value handed out.
            width: Minimum number of digits, zero-padded.

        Raises:
            ValueError: If `start` or `width` is negative.
        """
        if start < 0:
            raise ValueError("start must be non-negative")
        if width < 0:
            raise ValueError("width must be non-negative")

        self._prefix = prefix
        self._next = start
        self._width = width
        self._lock = threading.Lock()

    @property
    def prefix(self) -> str:
        return self._prefix

    def generate(self) -> str:
        with self._lock:
            value = self._next
            self._next += 1
        return f"{self._prefix}{value:0{self._width}d}"


def create_id_generator(settings: ProviderSettings | None = None) -> AbstractIdGenerator[str]:
    """
    Builds the identifier generator selected by configuration.

    Args:
        settings: Provider settings. Defaults to the application settings.

    Returns:
        The configured identifier generator.

    Raises:
        ConfigurationException: If the configured strategy is unknown.
    """
    settings = settings or get_settings()

    if settings.ID_GENERATOR == "uuid":
        return UuidIdGenerator()
    if settings.ID_GENERATOR == "sequential":
        return SequentialIdGenerator(prefix=settings.SEQUENTIAL_ID_PREFIX, start=settings.SEQUENTIAL_ID_START)

    raise ConfigurationException(
        f"Unknown identifier generator '{settings.ID_GENERATOR}'",
        code="UNKNOWN_ID_GENERATOR",
        details={"id_generator": settings.ID_GENERATOR},
    )
