# ABOUTME: NoOp implementation of EntityConverter that never produces entities
# ABOUTME: Provides minimal conversion behaviour for testing scenarios

from collections.abc import Mapping
from typing import Any

from datacore.interfaces.data.converter import EntityConverter
from datacore.models.entity import Entity


class NoOpEntityConverter(EntityConverter[Any, Entity]):
    """
    No-operation implementation of EntityConverter.

    Every parse and every draft request reports absence, and serialisation
    returns an empty mapping. Useful where a type key must be registered but
    its documents should be ignored.
    """

    def to_plain_object(self, entity: Entity) -> dict[str, Any]:
        return {}

    def from_plain_object(self, value: Any) -> Entity | None:
        return None

    def create_draft(self, data: Mapping[str, Any]) -> dict[str, Any] | None:
        return None
