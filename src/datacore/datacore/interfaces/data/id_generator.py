# ABOUTME: Abstract identifier generator interface for newly created entities
# ABOUTME: Decouples identifier assignment policy from data providers

from abc import ABC, abstractmethod
from typing import Generic

from datacore.models.entity import IdT


class AbstractIdGenerator(ABC, Generic[IdT]):
    """
    [L0] Abstract interface for identifier generators.

    Data providers consult an identifier generator whenever a draft becomes a
    persisted entity. Implementations decide the identifier policy (random,
    sequential, remote service) and must never hand out the same identifier twice.
    """

    @abstractmethod
    def generate(self) -> IdT:
        """
        Produces a fresh identifier.

        Returns:
            IdT: A new identifier, unique among those produced by this generator.
        """
        pass
