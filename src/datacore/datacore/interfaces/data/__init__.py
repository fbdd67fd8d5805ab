# ABOUTME: Data interfaces package exports
# ABOUTME: Exports abstract classes for entity conversion, identifier generation and data provision

from .converter import EntityConverter, EntityConverterConfig, build_converter_map
from .id_generator import AbstractIdGenerator
from .provider import AbstractDataProvider

__all__ = [
    "EntityConverter",
    "EntityConverterConfig",
    "build_converter_map",
    "AbstractIdGenerator",
    "AbstractDataProvider",
]
