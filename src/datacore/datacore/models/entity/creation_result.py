"""Entity creation outcome.

This module defines `CreationFailureReason` and `CreationResult`, which report
why a draft could not be turned into a persisted entity instead of collapsing
every failure into "no value".
"""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from datacore.models.entity.entity import Entity

EntityT = TypeVar("EntityT", bound=Entity)


class CreationFailureReason(str, Enum):
    """Reason codes for a failed entity creation."""

    UNKNOWN_TYPE_KEY = "unknown_type_key"  # No converter registered for the draft's type key
    INVALID_DRAFT = "invalid_draft"  # Converter rejected the draft payload
    ID_GENERATION_FAILED = "id_generation_failed"
    ID_COLLISION = "id_collision"  # Generated id already in use at the target path
    CONVERSION_FAILED = "conversion_failed"  # Assembled plain object did not parse
    STORAGE_LIMIT_EXCEEDED = "storage_limit_exceeded"
    PROVIDER_CLOSED = "provider_closed"
    INVALID_PATH = "invalid_path"


class CreationResult(BaseModel, Generic[EntityT]):
    """
    The outcome of creating an entity from a draft.

    Attributes:
        entity (EntityT | None): The created entity, `None` on failure.
        reason (CreationFailureReason | None): Why creation failed, `None` on success.
        message (str): Human-readable detail for failures.
        path (str | None): The document path of the created entity, when known.
    """

    model_config = ConfigDict(frozen=True)

    entity: EntityT | None = Field(default=None, description="Created entity")
    reason: CreationFailureReason | None = Field(default=None, description="Failure reason code")
    message: str = Field(default="", description="Failure detail")
    path: str | None = Field(default=None, description="Document path of the created entity")

    @property
    def is_success(self) -> bool:
        """Whether the entity was created."""
        return self.entity is not None and self.reason is None

    @classmethod
    def success(cls, entity: EntityT, path: str) -> "CreationResult[EntityT]":
        return cls(entity=entity, path=path)

    @classmethod
    def failure(
        cls, reason: CreationFailureReason, message: str = "", path: str | None = None
    ) -> "CreationResult[EntityT]":
        return cls(reason=reason, message=message, path=path)
