# ABOUTME: Core package initialization for the entity data-access layer
# ABOUTME: Provides entity, converter and data provider abstractions with reference implementations

"""
Entity data-access package.

This package provides the foundational abstractions for reading, observing
and creating typed entities stored at paths. It follows clean architecture
principles with clear separation between interfaces, models, and
implementations.
"""

__version__ = "0.1.0"
