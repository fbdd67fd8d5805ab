# ABOUTME: Core interfaces package exports
# ABOUTME: Exports all abstract interfaces of the data-access layer

# Data interfaces
from .data import (
    EntityConverter,
    EntityConverterConfig,
    build_converter_map,
    AbstractIdGenerator,
    AbstractDataProvider,
)

__all__ = [
    # Data
    "EntityConverter",
    "EntityConverterConfig",
    "build_converter_map",
    "AbstractIdGenerator",
    "AbstractDataProvider",
]
