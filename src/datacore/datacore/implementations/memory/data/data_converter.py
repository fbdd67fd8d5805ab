# ABOUTME: Pydantic-backed implementation of EntityConverter for any Entity subclass
# ABOUTME: Serialises with field aliases in JSON mode and reports malformed input as None

from collections.abc import Mapping
from typing import Any, Generic

from pydantic import BaseModel, ConfigDict, ValidationError, create_model

from datacore.config import get_logger
from datacore.interfaces.data.converter import EntityConverter
from datacore.models.entity import Entity, EntityT

logger = get_logger(__name__)

# Model field names that drafts never carry.
_RESERVED_FIELDS = ("id", "type_key")


class ModelEntityConverter(EntityConverter[Any, EntityT], Generic[EntityT]):
    """
    Converter for entity types declared as Pydantic models.

    Plain objects are produced with `model_dump(mode="json", by_alias=True)`,
    so they only contain JSON-compatible values and use the wire names of the
    fields (`typeKey` rather than `type_key`). Parsing uses `model_validate`;
    a `ValidationError` becomes `None`.

    Drafts are validated against a model derived from the entity class with
    `id` and `type_key` removed and extra keys forbidden. Field validators of
    the entity class run when the draft is turned into an entity, not when
    the draft is built.

    Example:
        >>> class Task(Entity[str]):
        ...     type_key: Literal["task"] = Field(default="task", alias="typeKey")
        ...     title: str
        >>> converter = ModelEntityConverter(Task)
        >>> converter.from_plain_object({"typeKey": "task", "title": "buy milk"})
        Task(id=None, type_key='task', title='buy milk')
    """

    def __init__(self, entity_class: type[EntityT]):
        """
        Initialize the converter.

        Args:
            entity_class: The `Entity` subclass this converter handles.

        Raises:
            TypeError: If `entity_class` is not an `Entity` subclass.
        """
        if not (isinstance(entity_class, type) and issubclass(entity_class, Entity)):
            raise TypeError("entity_class must be a subclass of Entity")

        self._entity_class = entity_class
        self._draft_model = self._build_draft_model(entity_class)

    @property
    def entity_class(self) -> type[EntityT]:
        return self._entity_class

    @staticmethod
    def _build_draft_model(entity_class: type[Entity]) -> type[BaseModel]:
        field_definitions: dict[str, Any] = {
            name: (info.annotation, info)
            for name, info in entity_class.model_fields.items()
            if name not in _RESERVED_FIELDS
        }
        return create_model(
            f"{entity_class.__name__}Draft",
            __config__=ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True),
            **field_definitions,
        )

    def to_plain_object(self, entity: EntityT) -> dict[str, Any]:
        if not isinstance(entity, self._entity_class):
            raise TypeError(
                f"{type(self).__name__} for {self._entity_class.__name__} cannot serialise {type(entity).__name__}"
            )
        return entity.model_dump(mode="json", by_alias=True)

    def from_plain_object(self, value: Any) -> EntityT | None:
        if not isinstance(value, Mapping):
            logger.debug(f"Cannot parse {type(value).__name__} as {self._entity_class.__name__}")
            return None

        try:
            return self._entity_class.model_validate(dict(value))
        except ValidationError as e:
            logger.debug(
                f"Plain object does not match {self._entity_class.__name__}",
                errors=e.error_count(),
            )
            return None

    def create_draft(self, data: Mapping[str, Any]) -> dict[str, Any] | None:
        if not isinstance(data, Mapping):
            return None

        try:
            draft = self._draft_model.model_validate(dict(data))
        except ValidationError as e:
            logger.debug(
                f"Draft data rejected for {self._entity_class.__name__}",
                errors=e.error_count(),
            )
            return None

        return draft.model_dump(mode="json", by_alias=True)

    def __repr__(self) -> str:
        return f"ModelEntityConverter({self._entity_class.__name__})"
