# ABOUTME: NoOp implementation of AbstractIdGenerator returning a fixed identifier
# ABOUTME: Provides identifier generation for providers that never persist anything

from datacore.interfaces.data.id_generator import AbstractIdGenerator


class NoOpIdGenerator(AbstractIdGenerator[str]):
    """Always returns `"noop-id"`. Only suitable where nothing is stored."""

    def generate(self) -> str:
        return "noop-id"
