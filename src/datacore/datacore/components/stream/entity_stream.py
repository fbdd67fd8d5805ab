# ABOUTME: Push-based stream of entity values with cancellable subscriptions
# ABOUTME: Replays the latest value to late subscribers and supports async iteration

from __future__ import annotations

import asyncio
import threading
import uuid
from collections import deque
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from datacore.config.logging import get_logger
from datacore.exceptions import StreamClosedError

logger = get_logger(__name__)

T = TypeVar("T")

NextHandler = Callable[[Any], None]
ErrorHandler = Callable[[BaseException], None]
CompleteHandler = Callable[[], None]

_COMPLETE = object()

# Kinds of queued delivery signals
_NEXT = "next"
_TERMINAL = "terminal"


@dataclass
class _Failure:
    error: BaseException


@dataclass
class _Observer:
    """Internal observer registration."""

    id: str
    on_next: NextHandler
    on_error: ErrorHandler | None = None
    on_complete: CompleteHandler | None = None


def _call_in_loop(loop: asyncio.AbstractEventLoop, callback: Callable[..., None], *args: Any) -> None:
    """Run `callback` on `loop`, hopping threads when invoked from elsewhere."""
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None

    if running is loop:
        callback(*args)
    else:
        loop.call_soon_threadsafe(callback, *args)


class StreamSubscription:
    """
    Handle for a single subscriber of an `EntityStream`.

    Unsubscribing is idempotent: calling `unsubscribe()` any number of times
    never raises, and no value is delivered to the subscriber afterwards.
    """

    def __init__(self, stream: "EntityStream[Any]", subscription_id: str):
        self._stream = stream
        self._id = subscription_id
        self._closed = False

    @property
    def id(self) -> str:
        return self._id

    @property
    def closed(self) -> bool:
        """True once unsubscribed or once the stream has terminated."""
        return self._closed or not self._stream._is_subscribed(self._id)

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._stream._remove(self._id)

    def __repr__(self) -> str:
        return f"StreamSubscription(id='{self._id}', closed={self.closed})"


class _StreamIterator(Generic[T]):
    """
    Async iterator over a stream's values.

    The subscription is released as soon as the stream terminates, when
    `aclose()` is awaited, or when the iterator is dropped. Leaving an
    `async for` loop early drops the iterator, so the source is released
    without waiting for a finalizer; wrap it in `contextlib.aclosing` to make
    the release explicit.
    """

    def __init__(self, stream: EntityStream[T]):
        self._done = False
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[Any] = asyncio.Queue()
        self._queue = queue

        # Callbacks capture the loop and queue only, so dropping the iterator frees it at once
        self._subscription = stream.subscribe(
            lambda value: _call_in_loop(loop, queue.put_nowait, value),
            on_error=lambda error: _call_in_loop(loop, queue.put_nowait, _Failure(error)),
            on_complete=lambda: _call_in_loop(loop, queue.put_nowait, _COMPLETE),
        )

    def __aiter__(self) -> _StreamIterator[T]:
        return self

    async def __anext__(self) -> T:
        if self._done:
            raise StopAsyncIteration

        item = await self._queue.get()
        if item is _COMPLETE:
            self.close()
            raise StopAsyncIteration
        if isinstance(item, _Failure):
            self.close()
            raise item.error
        return item

    def close(self) -> None:
        self._done = True
        self._subscription.unsubscribe()

    async def aclose(self) -> None:
        self.close()

    def __del__(self) -> None:
        subscription = getattr(self, "_subscription", None)
        if subscription is not None:
            subscription.unsubscribe()


class EntityStream(Generic[T]):
    """
    A cancellable push sequence of values.

    Producers call `emit()` zero or more times and finally `complete()` or
    `fail()`. Consumers either register callbacks through `subscribe()` or
    iterate with `async for`. The stream remembers the latest value and its
    terminal state, so a subscriber arriving after an emission still receives
    that value, followed by the terminal notification if the stream has ended.

    Each stream represents one logical subscription to its backing source.
    The optional `on_activate` callback runs once, when the first subscriber
    arrives and before the latest value is replayed to it, so a source can
    attach lazily and emit its current state. When the last subscriber
    leaves, or when the stream terminates, the optional `on_dispose` callback
    runs exactly once to release the source, and the stream is considered
    complete from then on.

    Thread Safety: subscriber bookkeeping is guarded by an internal lock.
    Every delivery, including the replay to a new subscriber, happens while
    holding a re-entrant delivery lock, which a source may share with the
    stream to keep its own writes and the stream's deliveries in one order.
    Signals raised from inside a callback are queued and delivered once the
    current value has reached every subscriber, so all subscribers observe
    values in the same order.
    """

    def __init__(
        self,
        *,
        name: str | None = None,
        on_dispose: Callable[[], None] | None = None,
        on_activate: Callable[[], None] | None = None,
        delivery_lock: AbstractContextManager[Any] | None = None,
    ):
        """
        Initialize the stream.

        Args:
            name: Optional label used in logs and errors.
            on_dispose: Callback releasing the backing source, run at most once.
            on_activate: Callback attaching the backing source, run when the first subscriber arrives.
            delivery_lock: Re-entrant lock serializing deliveries. Defaults to a private `RLock`.
        """
        self._name = name or "stream"
        self._observers: dict[str, _Observer] = {}
        self._lock = threading.RLock()
        self._delivery_lock = delivery_lock if delivery_lock is not None else threading.RLock()

        self._pending: deque[tuple[str, Any]] = deque()
        self._draining = False

        self._has_value = False
        self._latest: T | None = None
        self._completed = False
        self._error: BaseException | None = None

        self._on_activate = on_activate
        self._on_dispose = on_dispose
        self._disposed = False
        self._emission_count = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_terminated(self) -> bool:
        """True once the stream has completed, failed or been disposed."""
        return self._completed or self._error is not None

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def has_value(self) -> bool:
        return self._has_value

    @property
    def latest(self) -> T | None:
        """The most recently delivered value, `None` if nothing was emitted."""
        return self._latest

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._observers)

    @property
    def emission_count(self) -> int:
        return self._emission_count

    # Producer side

    def emit(self, value: T) -> None:
        """
        Pushes a value to every current subscriber.

        Raises:
            StreamClosedError: If the stream has already terminated.
        """
        with self._delivery_lock:
            with self._lock:
                if self.is_terminated:
                    raise StreamClosedError(
                        f"Stream '{self._name}' is closed",
                        code="STREAM_CLOSED",
                        details={"stream": self._name},
                    )
            self._pending.append((_NEXT, value))
            self._drain()

    def complete(self) -> None:
        """Terminates the stream normally. Calling it again is a no-op."""
        with self._delivery_lock:
            with self._lock:
                if self.is_terminated:
                    return
                self._completed = True
            self._pending.append((_TERMINAL, None))
            self._drain()

    def fail(self, error: BaseException) -> None:
        """Terminates the stream with an error. Ignored if already terminated."""
        with self._delivery_lock:
            with self._lock:
                if self.is_terminated:
                    logger.debug(f"Ignoring failure on terminated stream '{self._name}'", error=str(error))
                    return
                self._error = error
            self._pending.append((_TERMINAL, error))
            self._drain()

    # Consumer side

    def subscribe(
        self,
        on_next: NextHandler,
        *,
        on_error: ErrorHandler | None = None,
        on_complete: CompleteHandler | None = None,
    ) -> StreamSubscription:
        """
        Registers callbacks for values and the terminal notification.

        The latest value, if any, is delivered immediately. If the stream has
        already terminated, the terminal notification follows right after and
        the returned subscription is already closed.

        Raises:
            ValueError: If `on_next` is not callable.
        """
        if not callable(on_next):
            raise ValueError("on_next must be callable")

        subscription_id = str(uuid.uuid4())
        observer = _Observer(id=subscription_id, on_next=on_next, on_error=on_error, on_complete=on_complete)

        with self._delivery_lock:
            self._activate()

            with self._lock:
                has_value = self._has_value
                latest = self._latest
                terminated = self.is_terminated
                error = self._error
                if not terminated:
                    self._observers[subscription_id] = observer

            subscription = StreamSubscription(self, subscription_id)

            if has_value and (terminated or self._is_subscribed(subscription_id)):
                self._deliver(observer, latest)

            if terminated:
                subscription._closed = True
                if error is not None:
                    self._notify_error(observer, error)
                else:
                    self._notify_complete(observer)

        return subscription

    def __aiter__(self) -> _StreamIterator[T]:
        """Iterates over emitted values until the stream terminates."""
        return _StreamIterator(self)

    async def first(self, timeout: float | None = None) -> T:
        """
        Waits for the next value (or the replayed latest one) and unsubscribes.

        Raises:
            StreamClosedError: If the stream terminates without a value.
            TimeoutError: If no value arrives within `timeout` seconds.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[T] = loop.create_future()

        def resolve(value: T) -> None:
            if not future.done():
                future.set_result(value)

        def reject(error: BaseException) -> None:
            if not future.done():
                future.set_exception(error)

        subscription = self.subscribe(
            lambda value: _call_in_loop(loop, resolve, value),
            on_error=lambda error: _call_in_loop(loop, reject, error),
            on_complete=lambda: _call_in_loop(
                loop,
                reject,
                StreamClosedError(
                    f"Stream '{self._name}' completed without a value",
                    code="STREAM_EMPTY",
                    details={"stream": self._name},
                ),
            ),
        )
        try:
            return await asyncio.wait_for(future, timeout)
        finally:
            subscription.unsubscribe()

    # Internal helpers

    def _is_subscribed(self, subscription_id: str) -> bool:
        with self._lock:
            return subscription_id in self._observers

    def _drain(self) -> None:
        """Deliver queued signals in order. Caller holds the delivery lock."""
        if self._draining:
            return

        self._draining = True
        try:
            while self._pending:
                kind, payload = self._pending.popleft()
                if kind == _NEXT:
                    self._fan_out(payload)
                else:
                    self._terminate(payload)
        finally:
            self._draining = False

    def _fan_out(self, value: Any) -> None:
        with self._lock:
            self._latest = value
            self._has_value = True
            self._emission_count += 1
            observers = list(self._observers.values())

        for observer in observers:
            # An earlier callback may have cancelled this subscriber
            if self._is_subscribed(observer.id):
                self._deliver(observer, value)

    def _terminate(self, error: BaseException | None) -> None:
        with self._lock:
            observers = list(self._observers.values())
            self._observers.clear()

        for observer in observers:
            if error is not None:
                self._notify_error(observer, error)
            else:
                self._notify_complete(observer)

        self._dispose()

    def _activate(self) -> None:
        with self._lock:
            on_activate = self._on_activate
            self._on_activate = None
            if self.is_terminated:
                return

        if on_activate is None:
            return

        try:
            on_activate()
        except Exception as e:
            logger.error(f"Error attaching source of stream '{self._name}'", error=str(e))
            self.fail(e)

    def _remove(self, subscription_id: str) -> None:
        with self._lock:
            removed = self._observers.pop(subscription_id, None)
            release = removed is not None and not self._observers and not self.is_terminated
            if release:
                self._completed = True

        if release:
            logger.debug(f"Last subscriber left stream '{self._name}', releasing source")
            self._dispose()

    def _dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            on_dispose = self._on_dispose
            self._on_dispose = None

        if on_dispose is not None:
            try:
                on_dispose()
            except Exception as e:
                logger.error(f"Error releasing source of stream '{self._name}'", error=str(e))

    def _deliver(self, observer: _Observer, value: Any) -> None:
        try:
            observer.on_next(value)
        except Exception as e:
            logger.error(
                f"Error in subscriber of stream '{self._name}'",
                subscription_id=observer.id,
                error=str(e),
            )

    def _notify_complete(self, observer: _Observer) -> None:
        if observer.on_complete is None:
            return
        try:
            observer.on_complete()
        except Exception as e:
            logger.error(
                f"Error in completion handler of stream '{self._name}'",
                subscription_id=observer.id,
                error=str(e),
            )

    def _notify_error(self, observer: _Observer, error: BaseException) -> None:
        if observer.on_error is None:
            logger.warning(f"Stream '{self._name}' failed with no error handler", error=str(error))
            return
        try:
            observer.on_error(error)
        except Exception as e:
            logger.error(
                f"Error in error handler of stream '{self._name}'",
                subscription_id=observer.id,
                error=str(e),
            )

    def __repr__(self) -> str:
        return (
            f"EntityStream(name='{self._name}', subscribers={self.subscriber_count}, "
            f"terminated={self.is_terminated})"
        )
