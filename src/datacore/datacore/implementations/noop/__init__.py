# ABOUTME: NoOp implementations package
# ABOUTME: Contains no-operation implementations for testing and benchmarking

# Data implementations
from .data.converter import NoOpEntityConverter
from .data.id_generator import NoOpIdGenerator
from .data.provider import NoOpDataProvider

__all__ = [
    # Data
    "NoOpEntityConverter",
    "NoOpIdGenerator",
    "NoOpDataProvider",
]
