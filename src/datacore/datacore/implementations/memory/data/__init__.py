# ABOUTME: In-memory data implementations package
# ABOUTME: Exports the in-memory provider, the model converter and identifier generators

from .data_converter import ModelEntityConverter
from .data_provider import InMemoryDataProvider
from .id_generator import SequentialIdGenerator, UuidIdGenerator, create_id_generator

__all__ = [
    "ModelEntityConverter",
    "InMemoryDataProvider",
    "SequentialIdGenerator",
    "UuidIdGenerator",
    "create_id_generator",
]
