"""Entity draft model.

A draft is the converter-validated payload of an entity that has not been
persisted yet. It carries neither an identifier nor the discriminator inside
its fields; the envelope remembers the type key so the provider can stamp the
discriminator when the entity is created.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from datacore.models.entity.entity import ENTITY_ID_FIELD, ENTITY_TYPE_KEY_FIELD


class EntityDraft(BaseModel):
    """
    A pending entity awaiting creation.

    Attributes:
        type_key (str): The discriminator of the converter that produced the payload.
        fields (dict[str, Any]): The plain payload, without `id` and `typeKey`.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    type_key: str = Field(..., min_length=1, description="Discriminator of the producing converter")
    fields: dict[str, Any] = Field(default_factory=dict, description="Draft payload without id and typeKey")

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: dict[str, Any]) -> dict[str, Any]:
        """
        Rejects payloads that already carry an identifier or discriminator.

        Raises:
            ValueError: If `id` or `typeKey` is present in the payload.
        """
        reserved = {ENTITY_ID_FIELD, ENTITY_TYPE_KEY_FIELD} & set(v)
        if reserved:
            raise ValueError(f"Draft fields must not contain reserved keys: {sorted(reserved)}")
        return v
