"""
ABOUTME: [L0] Entity converter interface for translating between plain objects and entities
ABOUTME: Defines the converter contract, its registration config, and the converter map builder
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Generic

from pydantic import BaseModel, ConfigDict, Field, field_validator

from datacore.exceptions import ConfigurationException
from datacore.models.entity import EntityT, IdT


class EntityConverter(ABC, Generic[IdT, EntityT]):
    """
    [L0] Abstract base class for entity converters.

    A converter owns one entity type. It translates between the raw, untyped
    representation a storage backend holds (a plain, JSON-compatible mapping)
    and the typed `Entity` used by the rest of the application, and it builds
    drafts for entities that have not been persisted yet.

    Converters report malformed input by returning `None`; they do not raise.
    """

    @abstractmethod
    def to_plain_object(self, entity: EntityT) -> dict[str, Any]:
        """
        Produces a storage-safe representation of a typed entity.

        The result must round-trip: `from_plain_object(to_plain_object(e))`
        yields an entity equal to `e` (same `id`, `type_key` and fields).

        Args:
            entity (EntityT): The entity to serialise.

        Returns:
            dict[str, Any]: A JSON-compatible mapping including `id` and `typeKey`.
        """
        pass

    @abstractmethod
    def from_plain_object(self, value: Any) -> EntityT | None:
        """
        Parses an untyped value into a typed entity.

        Args:
            value (Any): The raw value, typically a mapping read from storage.

        Returns:
            EntityT | None: The parsed entity, or `None` when the value does not
                            match the expected shape.
        """
        pass

    @abstractmethod
    def create_draft(self, data: Mapping[str, Any]) -> dict[str, Any] | None:
        """
        Synthesises a persistable draft payload from caller-supplied field data.

        The payload omits the identifier and the discriminator; both are
        assigned downstream when the entity is created.

        Args:
            data (Mapping[str, Any]): Field values for the new entity.

        Returns:
            dict[str, Any] | None: The validated payload, or `None` when the data
                                   is not acceptable for this entity type.
        """
        pass


class EntityConverterConfig(BaseModel):
    """
    Pairs a type key with the converter responsible for that type.

    Attributes:
        type_key (str): The discriminator value, unique within a converter map.
        converter (EntityConverter): The converter handling entities with this key.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type_key: str = Field(..., description="Discriminator value handled by the converter")
    converter: EntityConverter = Field(..., description="Converter for this type key")

    @field_validator("type_key")
    @classmethod
    def validate_type_key(cls, v: str) -> str:
        """
        Strips the type key and rejects empty values.

        Raises:
            ValueError: If the type key is empty after stripping.
        """
        if not isinstance(v, str):
            raise ValueError("type_key must be a string")
        v = v.strip()
        if not v:
            raise ValueError("type_key cannot be empty")
        return v


def build_converter_map(configs: Iterable[EntityConverterConfig]) -> Mapping[str, EntityConverter]:
    """
    Builds a read-only mapping from type key to converter.

    Args:
        configs: The converter registrations.

    Returns:
        A read-only mapping keyed by type key.

    Raises:
        ConfigurationException: If two registrations share a type key.
    """
    converters: dict[str, EntityConverter] = {}
    for config in configs:
        if config.type_key in converters:
            raise ConfigurationException(
                f"Duplicate converter registration for type key '{config.type_key}'",
                code="DUPLICATE_TYPE_KEY",
                details={"type_key": config.type_key},
            )
        converters[config.type_key] = config.converter
    return MappingProxyType(converters)
