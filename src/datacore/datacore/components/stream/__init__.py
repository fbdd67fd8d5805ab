# ABOUTME: Stream components package exports
# ABOUTME: Exports the push-based entity stream and its subscription handle

from .entity_stream import EntityStream, StreamSubscription

__all__ = [
    "EntityStream",
    "StreamSubscription",
]
