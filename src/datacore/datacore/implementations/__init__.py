# ABOUTME: Core implementations package exports
# ABOUTME: Contains concrete implementations of core interfaces

"""
Core Implementations

This module contains simple implementations of core interfaces.
"""

from .memory import InMemoryDataProvider, ModelEntityConverter, SequentialIdGenerator, UuidIdGenerator
from .noop import NoOpDataProvider, NoOpEntityConverter, NoOpIdGenerator

__all__ = [
    "InMemoryDataProvider",
    "ModelEntityConverter",
    "SequentialIdGenerator",
    "UuidIdGenerator",
    "NoOpDataProvider",
    "NoOpEntityConverter",
    "NoOpIdGenerator",
]
