# ABOUTME: Models package initialization
# ABOUTME: Exports all core data models and related classes

from .entity import (
    Entity,
    IdT,
    EntityT,
    ENTITY_ID_FIELD,
    ENTITY_TYPE_KEY_FIELD,
    EntityDraft,
    CreationFailureReason,
    CreationResult,
)

__all__ = [
    "Entity",
    "IdT",
    "EntityT",
    "ENTITY_ID_FIELD",
    "ENTITY_TYPE_KEY_FIELD",
    "EntityDraft",
    "CreationFailureReason",
    "CreationResult",
]
