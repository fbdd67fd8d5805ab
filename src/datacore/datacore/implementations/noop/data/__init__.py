# ABOUTME: NoOp data implementations package
# ABOUTME: Exports no-operation converter, identifier generator and provider

from .converter import NoOpEntityConverter
from .id_generator import NoOpIdGenerator
from .provider import NoOpDataProvider

__all__ = [
    "NoOpEntityConverter",
    "NoOpIdGenerator",
    "NoOpDataProvider",
]
