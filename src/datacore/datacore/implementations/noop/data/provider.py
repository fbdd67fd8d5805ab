# ABOUTME: NoOp implementation of AbstractDataProvider that stores and finds nothing
# ABOUTME: Provides minimal data provider functionality for testing scenarios

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from datacore.components.stream import EntityStream
from datacore.implementations.noop.data.id_generator import NoOpIdGenerator
from datacore.interfaces.data.converter import EntityConverter
from datacore.interfaces.data.id_generator import AbstractIdGenerator
from datacore.interfaces.data.provider import AbstractDataProvider
from datacore.models.entity import CreationFailureReason, CreationResult, Entity, EntityDraft


class NoOpDataProvider(AbstractDataProvider):
    """
    No-operation implementation of AbstractDataProvider.

    This implementation behaves like an empty store that refuses writes:
    every entity lookup emits `None`, every collection emits an empty
    snapshot, and every creation emits `None`. All streams complete right
    after their single emission.

    Use Cases:
    - Testing consumers against an always-empty backend
    - Performance benchmarking without storage overhead
    - Fallback when no storage backend is configured
    """

    def __init__(self, id_generator: AbstractIdGenerator | None = None):
        """Initialize the no-operation data provider."""
        self._converter_map: Mapping[str, EntityConverter] = MappingProxyType({})
        self._id_generator = id_generator or NoOpIdGenerator()
        self._closed = False

    @property
    def converter_map(self) -> Mapping[str, EntityConverter]:
        return self._converter_map

    @property
    def id_generator(self) -> AbstractIdGenerator:
        return self._id_generator

    @property
    def is_closed(self) -> bool:
        return self._closed

    def get_entity(self, path: str) -> EntityStream[Entity | None]:
        return self._single_value_stream(f"entity:{path}", None)

    def create_entity(self, path: str, draft: EntityDraft) -> EntityStream[Entity | None]:
        return self._single_value_stream(f"create:{path}", None)

    def create_entity_with_result(self, path: str, draft: EntityDraft) -> EntityStream[CreationResult]:
        result = CreationResult.failure(
            CreationFailureReason.UNKNOWN_TYPE_KEY, "NoOpDataProvider has no converters registered"
        )
        return self._single_value_stream(f"create:{path}", result)

    def listen_to_collection_changes(self, path: str) -> EntityStream[list[Entity]]:
        return self._single_value_stream(f"collection:{path}", [])

    def convert_into_entity(self, raw_object: Any) -> Entity | None:
        return None

    async def close(self) -> None:
        self._closed = True

    @staticmethod
    def _single_value_stream(name: str, value: Any) -> EntityStream:
        stream: EntityStream = EntityStream(name=name)
        stream.emit(value)
        stream.complete()
        return stream
