# ABOUTME: In-memory implementations package
# ABOUTME: Implementations backed by process memory, with no external services

from .data.data_converter import ModelEntityConverter
from .data.data_provider import InMemoryDataProvider
from .data.id_generator import SequentialIdGenerator, UuidIdGenerator, create_id_generator

__all__ = [
    "ModelEntityConverter",
    "InMemoryDataProvider",
    "SequentialIdGenerator",
    "UuidIdGenerator",
    "create_id_generator",
]
