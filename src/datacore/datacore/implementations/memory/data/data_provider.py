# ABOUTME: In-memory implementation of AbstractDataProvider for testing and development
# ABOUTME: Stores plain objects by path and pushes entity and collection changes to live streams

import copy
import threading
from collections import defaultdict, deque
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Callable

from datacore.components.stream import EntityStream
from datacore.config import get_logger, get_settings
from datacore.exceptions import StorageError, StreamClosedError, ValidationException
from datacore.implementations.memory.data.id_generator import create_id_generator
from datacore.interfaces.data.converter import EntityConverter, EntityConverterConfig, build_converter_map
from datacore.interfaces.data.id_generator import AbstractIdGenerator
from datacore.interfaces.data.provider import AbstractDataProvider
from datacore.models.entity import (
    ENTITY_ID_FIELD,
    ENTITY_TYPE_KEY_FIELD,
    CreationFailureReason,
    CreationResult,
    Entity,
    EntityDraft,
)

PATH_SEPARATOR = "/"

logger = get_logger(__name__)


class InMemoryDataProvider(AbstractDataProvider):
    """
    In-memory implementation of AbstractDataProvider.

    Documents are kept as plain objects (the converters' storage-safe
    representation) keyed by normalised document path, and are converted into
    entities on the way out. All data lives in memory and is dropped on close.

    Features:
    - Live `get_entity` streams that push every change of the document
    - Collection listeners emitting full snapshots in insertion order
    - Streams attach to storage on their first subscriber, so unobserved streams cost nothing
    - Identifier assignment through the injected `id_generator`
    - Creation outcomes with failure reason codes
    - Backend-side writes (`put_raw`, `delete`) to simulate external changes
    - Configurable entity limit

    Thread Safety: storage and listener registries are guarded by a
    re-entrant lock, which is also the delivery lock of every live stream.
    Changes are queued and pushed while holding it, one change to all
    streams before the next, so a write made from inside a subscriber
    callback never overtakes the change being delivered.
    """

    def __init__(
        self,
        converters: Iterable[EntityConverterConfig] | Mapping[str, EntityConverter],
        id_generator: AbstractIdGenerator | None = None,
        *,
        max_entities: int | None = None,
        name: str = "InMemoryDataProvider",
    ):
        """
        Initialize the in-memory data provider.

        Args:
            converters: Converter registrations, or a ready-made type key to converter mapping.
            id_generator: Identifier generator. Defaults to the configured strategy.
            max_entities: Maximum number of stored documents. Defaults to `MAX_ENTITIES`.
            name: The name of this provider instance, used in logs.

        Raises:
            ConfigurationException: If converter registrations repeat a type key.
        """
        settings = get_settings()

        if isinstance(converters, Mapping):
            self._converter_map: Mapping[str, EntityConverter] = MappingProxyType(dict(converters))
        else:
            self._converter_map = build_converter_map(converters)

        self._id_generator = id_generator or create_id_generator(settings)
        self._max_entities = max_entities if max_entities is not None else settings.MAX_ENTITIES
        self._name = name

        # Storage: document path -> plain object, plus ordered children per collection
        self._documents: dict[str, dict[str, Any]] = {}
        self._children: dict[str, dict[str, None]] = defaultdict(dict)

        # Subscribed streams keyed by document or collection path
        self._document_streams: dict[str, list[EntityStream]] = defaultdict(list)
        self._collection_streams: dict[str, list[EntityStream]] = defaultdict(list)

        # Changed document paths awaiting delivery
        self._pending_changes: deque[str] = deque()
        self._notifying = False

        self._lock = threading.RLock()
        self._closed = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def converter_map(self) -> Mapping[str, EntityConverter]:
        return self._converter_map

    @property
    def id_generator(self) -> AbstractIdGenerator:
        return self._id_generator

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def max_entities(self) -> int:
        return self._max_entities

    # Reads and subscriptions

    def get_entity(self, path: str) -> EntityStream[Entity | None]:
        """
        Stream the entity at `path`, followed by every later change of it.

        The stream attaches to storage when its first subscriber arrives and
        starts with the document's state at that moment.
        """
        self._ensure_not_closed()
        document_path = self._normalize_path(path)

        stream: EntityStream[Entity | None] = EntityStream(
            name=f"entity:{document_path}",
            on_activate=lambda: self._attach(self._document_streams, document_path, stream, self._current_entity),
            on_dispose=lambda: self._detach(self._document_streams, document_path, stream),
            delivery_lock=self._lock,
        )
        return stream

    def listen_to_collection_changes(self, path: str) -> EntityStream[list[Entity]]:
        """Stream snapshots of the direct children of the collection at `path`."""
        self._ensure_not_closed()
        collection_path = self._normalize_path(path)

        stream: EntityStream[list[Entity]] = EntityStream(
            name=f"collection:{collection_path}",
            on_activate=lambda: self._attach(self._collection_streams, collection_path, stream, self._snapshot),
            on_dispose=lambda: self._detach(self._collection_streams, collection_path, stream),
            delivery_lock=self._lock,
        )
        return stream

    def convert_into_entity(self, raw_object: Any) -> Entity | None:
        if not isinstance(raw_object, Mapping):
            logger.debug(f"Cannot convert {type(raw_object).__name__} into an entity")
            return None

        type_key = raw_object.get(ENTITY_TYPE_KEY_FIELD)
        if not isinstance(type_key, str):
            logger.debug("Raw object has no type key", keys=list(raw_object.keys()))
            return None

        converter = self._converter_map.get(type_key)
        if converter is None:
            logger.debug(f"No converter registered for type key '{type_key}'")
            return None

        return converter.from_plain_object(raw_object)

    # Creation

    def create_entity(self, path: str, draft: EntityDraft) -> EntityStream[Entity | None]:
        result = self._create(path, draft)
        if not result.is_success:
            logger.warning(
                f"Entity creation under '{path}' failed",
                reason=result.reason.value if result.reason else None,
                detail=result.message,
            )
        return self._single_value_stream(f"create:{path}", result.entity)

    def create_entity_with_result(self, path: str, draft: EntityDraft) -> EntityStream[CreationResult]:
        return self._single_value_stream(f"create:{path}", self._create(path, draft))

    def _create(self, path: str, draft: EntityDraft) -> CreationResult:
        if self._closed:
            return CreationResult.failure(CreationFailureReason.PROVIDER_CLOSED, "Provider is closed")

        try:
            collection_path = self._normalize_path(path)
        except ValidationException as e:
            return CreationResult.failure(CreationFailureReason.INVALID_PATH, e.message)

        if not isinstance(draft, EntityDraft):
            return CreationResult.failure(
                CreationFailureReason.INVALID_DRAFT, f"Expected EntityDraft, got {type(draft).__name__}"
            )

        converter = self._converter_map.get(draft.type_key)
        if converter is None:
            return CreationResult.failure(
                CreationFailureReason.UNKNOWN_TYPE_KEY, f"No converter registered for type key '{draft.type_key}'"
            )

        fields = converter.create_draft(draft.fields)
        if fields is None:
            return CreationResult.failure(
                CreationFailureReason.INVALID_DRAFT, f"Draft rejected by converter for '{draft.type_key}'"
            )

        try:
            entity_id = self._id_generator.generate()
        except Exception as e:
            logger.error("Identifier generator failed", generator=type(self._id_generator).__name__, error=str(e))
            return CreationResult.failure(CreationFailureReason.ID_GENERATION_FAILED, str(e))

        if entity_id is None or not str(entity_id).strip() or PATH_SEPARATOR in str(entity_id):
            return CreationResult.failure(
                CreationFailureReason.ID_GENERATION_FAILED, f"Unusable identifier {entity_id!r}"
            )

        document_path = f"{collection_path}{PATH_SEPARATOR}{entity_id}"
        entity = converter.from_plain_object(
            {**fields, ENTITY_ID_FIELD: entity_id, ENTITY_TYPE_KEY_FIELD: draft.type_key}
        )
        if entity is None:
            return CreationResult.failure(
                CreationFailureReason.CONVERSION_FAILED,
                f"Converter for '{draft.type_key}' rejected the assembled entity",
                path=document_path,
            )

        with self._lock:
            if self._closed:
                return CreationResult.failure(CreationFailureReason.PROVIDER_CLOSED, "Provider is closed")
            if document_path in self._documents:
                return CreationResult.failure(
                    CreationFailureReason.ID_COLLISION, f"Identifier {entity_id!r} already in use", path=document_path
                )
            if len(self._documents) >= self._max_entities:
                return CreationResult.failure(
                    CreationFailureReason.STORAGE_LIMIT_EXCEEDED,
                    f"Maximum entities limit ({self._max_entities}) exceeded",
                    path=document_path,
                )

            self._store(document_path, converter.to_plain_object(entity))
            self._notify(document_path)

        logger.debug(f"Created entity at '{document_path}'", type_key=draft.type_key)
        return CreationResult.success(entity, document_path)

    # Backend-side writes

    def put_raw(self, path: str, raw: Mapping[str, Any]) -> None:
        """
        Stores a plain object at a document path, as an external writer would.

        The object is stored as given, even if no converter can parse it; such
        documents read as `None` and are left out of collection snapshots.

        Raises:
            StorageError: If the provider is closed or the entity limit is reached.
            ValidationException: If the path or value is malformed.
        """
        self._ensure_not_closed()
        document_path = self._normalize_document_path(path)

        if not isinstance(raw, Mapping):
            raise ValidationException(
                "Value must be a mapping", code="INVALID_VALUE", details={"path": document_path}
            )

        with self._lock:
            if document_path not in self._documents and len(self._documents) >= self._max_entities:
                raise StorageError(
                    f"Maximum entities limit ({self._max_entities}) exceeded",
                    code="STORAGE_LIMIT_EXCEEDED",
                    details={"path": document_path},
                )
            self._store(document_path, copy.deepcopy(dict(raw)))
            self._notify(document_path)

    def delete(self, path: str) -> bool:
        """
        Removes the document at `path`.

        Returns:
            True if a document was removed, False if nothing was stored there.
        """
        self._ensure_not_closed()
        document_path = self._normalize_document_path(path)

        with self._lock:
            if document_path not in self._documents:
                return False

            del self._documents[document_path]
            collection_path = self._parent(document_path)
            siblings = self._children.get(collection_path)
            if siblings is not None:
                siblings.pop(document_path, None)
                if not siblings:
                    del self._children[collection_path]

            self._notify(document_path)

        return True

    def get_raw(self, path: str) -> dict[str, Any] | None:
        """Return a copy of the plain object stored at `path`, if any."""
        self._ensure_not_closed()
        document_path = self._normalize_path(path)
        with self._lock:
            raw = self._documents.get(document_path)
            return copy.deepcopy(raw) if raw is not None else None

    def count(self, collection: str | None = None) -> int:
        """Number of stored documents, optionally restricted to one collection."""
        with self._lock:
            if collection is None:
                return len(self._documents)
            return len(self._children.get(self._normalize_path(collection), {}))

    def get_listener_count(self, path: str | None = None) -> int:
        """Number of subscribed document and collection streams, optionally for one path."""
        with self._lock:
            if path is None:
                streams = [*self._document_streams.values(), *self._collection_streams.values()]
                return sum(len(s) for s in streams)
            normalized = self._normalize_path(path)
            return len(self._document_streams.get(normalized, [])) + len(
                self._collection_streams.get(normalized, [])
            )

    async def close(self) -> None:
        """Close the provider, complete every live stream and drop all data."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            streams = [
                stream
                for registry in (self._document_streams, self._collection_streams)
                for registered in registry.values()
                for stream in registered
            ]
            self._document_streams.clear()
            self._collection_streams.clear()
            self._documents.clear()
            self._children.clear()

        for stream in streams:
            stream.complete()

        logger.info(f"{self._name} closed", completed_streams=len(streams))

    # Internal helpers

    def _ensure_not_closed(self) -> None:
        if self._closed:
            raise StorageError("Provider is closed", code="PROVIDER_CLOSED")

    @staticmethod
    def _normalize_path(path: str) -> str:
        if not isinstance(path, str):
            raise ValidationException("Path must be a string", code="INVALID_PATH", details={"path": repr(path)})

        segments = [segment.strip() for segment in path.strip().strip(PATH_SEPARATOR).split(PATH_SEPARATOR)]
        if not all(segments):
            raise ValidationException(
                f"Invalid path '{path}': empty path segment", code="INVALID_PATH", details={"path": path}
            )
        return PATH_SEPARATOR.join(segments)

    def _normalize_document_path(self, path: str) -> str:
        document_path = self._normalize_path(path)
        if PATH_SEPARATOR not in document_path:
            raise ValidationException(
                f"Invalid document path '{path}': expected '<collection>/<id>'",
                code="INVALID_PATH",
                details={"path": path},
            )
        return document_path

    @staticmethod
    def _parent(document_path: str) -> str | None:
        if PATH_SEPARATOR not in document_path:
            return None
        return document_path.rsplit(PATH_SEPARATOR, 1)[0]

    def _store(self, document_path: str, raw: dict[str, Any]) -> None:
        self._documents[document_path] = raw
        collection_path = self._parent(document_path)
        if collection_path is not None:
            self._children[collection_path][document_path] = None

    def _current_entity(self, document_path: str) -> Entity | None:
        return self._convert_stored(document_path, self._documents.get(document_path))

    def _convert_stored(self, document_path: str, raw: dict[str, Any] | None) -> Entity | None:
        if raw is None:
            return None

        entity = self.convert_into_entity(raw)
        if entity is None:
            logger.warning(f"Stored object at '{document_path}' could not be converted into an entity")
        return entity

    def _snapshot(self, collection_path: str) -> list[Entity]:
        entities: list[Entity] = []
        for document_path in self._children.get(collection_path, {}):
            entity = self._convert_stored(document_path, self._documents.get(document_path))
            if entity is not None:
                entities.append(entity)
        return entities

    def _notify(self, document_path: str) -> None:
        """
        Queue a change of a document and deliver pending changes. Caller holds the lock.

        Writes made by subscribers while a change is being delivered only
        enqueue; the outermost call delivers them once the current change has
        reached every stream.
        """
        self._pending_changes.append(document_path)
        if self._notifying:
            return

        self._notifying = True
        try:
            while self._pending_changes:
                self._deliver_change(self._pending_changes.popleft())
        finally:
            self._notifying = False
            self._pending_changes.clear()

    def _deliver_change(self, document_path: str) -> None:
        """Push the state of a document and its collection, both read before any subscriber runs."""
        collection_path = self._parent(document_path)

        document_streams = list(self._document_streams.get(document_path, ()))
        collection_streams = list(self._collection_streams.get(collection_path, ())) if collection_path else []

        entity = self._current_entity(document_path) if document_streams else None
        snapshot = self._snapshot(collection_path) if collection_streams else []

        for stream in document_streams:
            self._safe_emit(stream, entity)
        for stream in collection_streams:
            self._safe_emit(stream, list(snapshot))

    @staticmethod
    def _safe_emit(stream: EntityStream, value: Any) -> None:
        try:
            stream.emit(value)
        except StreamClosedError:
            # Stream released concurrently; its dispose hook detaches it
            logger.debug(f"Skipping emission to released stream '{stream.name}'")

    def _attach(
        self,
        registry: dict[str, list[EntityStream]],
        path: str,
        stream: EntityStream,
        current: Callable[[str], Any],
    ) -> None:
        """Register a stream on its first subscriber and emit the state it starts from."""
        with self._lock:
            if self._closed:
                stream.complete()
                return
            registry[path].append(stream)
            stream.emit(current(path))

    def _detach(self, registry: dict[str, list[EntityStream]], path: str, stream: EntityStream) -> None:
        with self._lock:
            streams = registry.get(path)
            if not streams:
                return
            try:
                streams.remove(stream)
            except ValueError:
                pass
            if not streams:
                del registry[path]

    @staticmethod
    def _single_value_stream(name: str, value: Any) -> EntityStream:
        stream: EntityStream = EntityStream(name=name)
        stream.emit(value)
        stream.complete()
        return stream

    def __repr__(self) -> str:
        return f"InMemoryDataProvider(name='{self._name}', entities={len(self._documents)}, closed={self._closed})"
