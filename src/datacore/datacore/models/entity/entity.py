"""Entity model definition.

This module defines the generic Pydantic base model for typed records handled
by the data-access layer. Every entity carries an identifier of a generic type
and a discriminator (`type_key`, serialised as `typeKey`) naming the converter
responsible for it.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

IdT = TypeVar("IdT")

# Keys used for the identifier and the discriminator in plain objects.
ENTITY_ID_FIELD = "id"
ENTITY_TYPE_KEY_FIELD = "typeKey"


class Entity(BaseModel, Generic[IdT]):
    """
    Represents a typed record with an identifier and a type discriminator.

    Entities are immutable: once an identifier is assigned it cannot change,
    and the data-access layer never mutates an entity it hands out. Concrete
    entity types subclass `Entity[...]`, add their own fields, and usually
    narrow `type_key` to a `Literal` with a default so that a raw object
    carrying another discriminator fails validation.

    Attributes:
        id (IdT | None): The identifier. `None` means the entity has not been
            assigned one yet (e.g. parsed from a raw object without an `id`).
        type_key (str): The discriminator selecting the converter for this entity.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: IdT | None = Field(default=None, description="Entity identifier, immutable once assigned")
    type_key: str = Field(..., alias=ENTITY_TYPE_KEY_FIELD, min_length=1, description="Type discriminator")

    @property
    def has_id(self) -> bool:
        """Whether an identifier has been assigned."""
        return self.id is not None
