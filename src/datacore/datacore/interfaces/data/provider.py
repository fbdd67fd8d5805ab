# ABOUTME: Abstract data provider interface for entity access by path
# ABOUTME: Defines the contract for fetching, observing, creating and converting entities

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from datacore.components.stream import EntityStream
from datacore.interfaces.data.converter import EntityConverter
from datacore.interfaces.data.id_generator import AbstractIdGenerator
from datacore.models.entity import CreationResult, EntityDraft, EntityT


class AbstractDataProvider(ABC):
    """
    [L0] Abstract interface for a data provider.

    A data provider is the single point of access to persisted entities. It
    serves entities by path as push sequences (`EntityStream`), creates new
    entities from drafts with identifiers from its `id_generator`, and turns
    raw storage objects into typed entities by dispatching on their
    discriminator through `converter_map`.

    Paths are `/`-separated. A collection path names a group of documents
    (e.g. `"projects/p1/tasks"`); a document path is a collection path followed
    by a document identifier (e.g. `"projects/p1/tasks/t42"`).

    Failure is reported by absence: lookups and conversions yield `None`
    instead of raising. `create_entity_with_result` additionally reports why
    a creation failed.
    """

    @property
    @abstractmethod
    def converter_map(self) -> Mapping[str, EntityConverter]:
        """
        The converters consulted when a raw object must become a typed entity.

        Returns:
            Mapping[str, EntityConverter]: A read-only mapping from type key to converter.
        """
        pass

    @property
    @abstractmethod
    def id_generator(self) -> AbstractIdGenerator:
        """
        The generator supplying identifiers for newly created entities.

        Returns:
            AbstractIdGenerator: The identifier generator.
        """
        pass

    @abstractmethod
    def get_entity(self, path: str) -> EntityStream[EntityT | None]:
        """
        Looks up a single entity by document path.

        The returned stream emits at least once: the entity, or `None` when
        nothing (or nothing convertible) is stored at `path`. Whether it then
        completes or keeps pushing updates is up to the implementation. Each
        call is one logical subscription.

        Args:
            path (str): The document path.

        Returns:
            EntityStream[EntityT | None]: Stream of the entity at `path`.
        """
        pass

    @abstractmethod
    def create_entity(self, path: str, draft: EntityDraft) -> EntityStream[EntityT | None]:
        """
        Persists a draft under a collection and emits the created entity.

        The identifier is produced by `id_generator`; it is never taken from
        the draft. The stream emits the complete entity, or `None` if the
        entity could not be created.

        Args:
            path (str): The collection path to create the entity in.
            draft (EntityDraft): The draft to persist.

        Returns:
            EntityStream[EntityT | None]: Stream emitting the created entity or `None`.
        """
        pass

    @abstractmethod
    def create_entity_with_result(self, path: str, draft: EntityDraft) -> EntityStream[CreationResult]:
        """
        Same as `create_entity`, but emits a `CreationResult` with a reason code.

        Args:
            path (str): The collection path to create the entity in.
            draft (EntityDraft): The draft to persist.

        Returns:
            EntityStream[CreationResult]: Stream emitting the creation outcome.
        """
        pass

    @abstractmethod
    def listen_to_collection_changes(self, path: str) -> EntityStream[list[EntityT]]:
        """
        Subscribes to a collection and emits its full membership on every change.

        For a single subscription, snapshots are delivered in the order the
        underlying changes occurred. Each snapshot reflects the collection's
        state at that point.

        Args:
            path (str): The collection path.

        Returns:
            EntityStream[list[EntityT]]: Stream of membership snapshots.
        """
        pass

    @abstractmethod
    def convert_into_entity(self, raw_object: Any) -> EntityT | None:
        """
        Converts a raw object into a typed entity by dispatching on its discriminator.

        The object's `typeKey` selects the converter from `converter_map`,
        whose `from_plain_object` result is returned unchanged.

        Args:
            raw_object (Any): The raw object, typically a mapping.

        Returns:
            EntityT | None: The entity, or `None` when the discriminator is missing,
                            unknown, or the converter rejects the object.
        """
        pass

    def create_draft(self, type_key: str, data: Mapping[str, Any]) -> EntityDraft | None:
        """
        Builds a draft through the converter registered for `type_key`.

        Args:
            type_key (str): The discriminator of the entity type to draft.
            data (Mapping[str, Any]): Field values for the new entity.

        Returns:
            EntityDraft | None: The draft, or `None` when no converter is registered
                                for `type_key` or the converter rejects the data.
        """
        converter = self.converter_map.get(type_key)
        if converter is None:
            return None

        fields = converter.create_draft(data)
        if fields is None:
            return None

        return EntityDraft(type_key=type_key, fields=fields)

    @abstractmethod
    async def close(self) -> None:
        """
        Closes the provider and completes every live stream.

        Returns:
            None: This method does not return a value.
        """
        pass

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """
        Checks whether the provider has been closed.

        Returns:
            bool: `True` after `close()` has been called, `False` otherwise.
        """
        pass

    async def __aenter__(self) -> "AbstractDataProvider":
        """
        Asynchronous context manager entry point.

        Returns:
            AbstractDataProvider: The provider itself.
        """
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """
        Asynchronous context manager exit point.

        Closes the provider regardless of whether an exception occurred.
        """
        await self.close()
