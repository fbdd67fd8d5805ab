# ABOUTME: Entity models package exports
# ABOUTME: Exports the entity base model, drafts and creation results

from .entity import Entity, IdT, ENTITY_ID_FIELD, ENTITY_TYPE_KEY_FIELD
from .draft import EntityDraft
from .creation_result import CreationFailureReason, CreationResult, EntityT

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
