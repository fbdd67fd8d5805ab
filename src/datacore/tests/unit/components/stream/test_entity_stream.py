# ABOUTME: Unit tests for EntityStream and StreamSubscription
# ABOUTME: Tests emission, replay, termination, cancellation and async consumption

import asyncio
import threading
from contextlib import aclosing

import pytest

from datacore.components.stream import EntityStream, StreamSubscription
from datacore.exceptions import StreamClosedError


class TestEntityStreamEmission:
    """Test cases for pushing values to subscribers."""

    @pytest.mark.unit
    def test_subscriber_receives_values_in_order(self):
        stream: EntityStream[int] = EntityStream(name="numbers")
        received: list[int] = []
        stream.subscribe(received.append)

        for value in (1, 2, 3):
            stream.emit(value)

        assert received == [1, 2, 3]
        assert stream.emission_count == 3
        assert stream.latest == 3

    @pytest.mark.unit
    def test_late_subscriber_gets_latest_value_replayed(self):
        stream: EntityStream[str] = EntityStream()
        stream.emit("first")
        stream.emit("second")

        received: list[str] = []
        stream.subscribe(received.append)

        assert received == ["second"]

    @pytest.mark.unit
    def test_none_is_a_real_value(self):
        stream: EntityStream[None] = EntityStream()
        stream.emit(None)

        received = []
        stream.subscribe(received.append)

        assert stream.has_value
        assert received == [None]

    @pytest.mark.unit
    def test_no_replay_before_first_emission(self):
        stream: EntityStream[int] = EntityStream()
        received: list[int] = []
        stream.subscribe(received.append)

        assert received == []
        assert not stream.has_value

    @pytest.mark.unit
    def test_failing_subscriber_does_not_affect_others(self):
        stream: EntityStream[int] = EntityStream()
        received: list[int] = []

        def broken(_value):
            raise RuntimeError("boom")

        stream.subscribe(broken)
        stream.subscribe(received.append)
        stream.emit(7)

        assert received == [7]

    @pytest.mark.unit
    def test_subscribe_rejects_non_callable(self):
        stream: EntityStream[int] = EntityStream()

        with pytest.raises(ValueError, match="callable"):
            stream.subscribe("not callable")


class TestEntityStreamTermination:
    """Test cases for completion, failure and disposal."""

    @pytest.mark.unit
    def test_complete_notifies_and_closes_subscriptions(self):
        stream: EntityStream[int] = EntityStream()
        completed: list[bool] = []
        subscription = stream.subscribe(lambda _: None, on_complete=lambda: completed.append(True))

        stream.complete()

        assert completed == [True]
        assert stream.is_terminated
        assert subscription.closed
        assert stream.subscriber_count == 0

    @pytest.mark.unit
    def test_complete_twice_is_noop(self):
        stream: EntityStream[int] = EntityStream()
        completed: list[bool] = []
        stream.subscribe(lambda _: None, on_complete=lambda: completed.append(True))

        stream.complete()
        stream.complete()

        assert completed == [True]

    @pytest.mark.unit
    def test_emit_after_complete_raises(self):
        stream: EntityStream[int] = EntityStream(name="done")
        stream.complete()

        with pytest.raises(StreamClosedError) as exc_info:
            stream.emit(1)

        assert exc_info.value.code == "STREAM_CLOSED"
        assert exc_info.value.details == {"stream": "done"}

    @pytest.mark.unit
    def test_fail_notifies_error_handler(self):
        stream: EntityStream[int] = EntityStream()
        errors: list[BaseException] = []
        stream.subscribe(lambda _: None, on_error=errors.append)

        error = RuntimeError("backend lost")
        stream.fail(error)

        assert errors == [error]
        assert stream.is_terminated

    @pytest.mark.unit
    def test_subscribe_after_completion_replays_value_then_completes(self):
        stream: EntityStream[str] = EntityStream()
        stream.emit("final")
        stream.complete()

        events: list[str] = []
        subscription = stream.subscribe(events.append, on_complete=lambda: events.append("<complete>"))

        assert events == ["final", "<complete>"]
        assert subscription.closed

    @pytest.mark.unit
    def test_subscribe_after_failure_replays_error(self):
        stream: EntityStream[int] = EntityStream()
        error = ValueError("bad")
        stream.fail(error)

        errors: list[BaseException] = []
        stream.subscribe(lambda _: None, on_error=errors.append)

        assert errors == [error]

    @pytest.mark.unit
    def test_on_dispose_runs_once_on_completion(self):
        disposed: list[bool] = []
        stream: EntityStream[int] = EntityStream(on_dispose=lambda: disposed.append(True))

        stream.complete()
        stream.complete()

        assert disposed == [True]
        assert stream.is_disposed


class TestStreamSubscription:
    """Test cases for cancellation."""

    @pytest.mark.unit
    def test_unsubscribe_stops_delivery(self):
        stream: EntityStream[int] = EntityStream()
        received: list[int] = []
        subscription = stream.subscribe(received.append)
        keeper = stream.subscribe(lambda _: None)

        stream.emit(1)
        subscription.unsubscribe()
        stream.emit(2)

        assert received == [1]
        assert subscription.closed
        assert not keeper.closed

    @pytest.mark.unit
    def test_unsubscribe_twice_is_idempotent(self):
        disposed: list[bool] = []
        stream: EntityStream[int] = EntityStream(on_dispose=lambda: disposed.append(True))
        received: list[int] = []
        subscription = stream.subscribe(received.append)

        subscription.unsubscribe()
        subscription.unsubscribe()

        assert received == []
        assert disposed == [True]

    @pytest.mark.unit
    def test_last_unsubscribe_releases_source_and_terminates(self):
        disposed: list[bool] = []
        stream: EntityStream[int] = EntityStream(on_dispose=lambda: disposed.append(True))
        first = stream.subscribe(lambda _: None)
        second = stream.subscribe(lambda _: None)

        first.unsubscribe()
        assert disposed == []

        second.unsubscribe()
        assert disposed == [True]
        assert stream.is_terminated

    @pytest.mark.unit
    def test_unsubscribe_from_inside_callback(self):
        stream: EntityStream[int] = EntityStream()
        received: list[int] = []
        holder: dict[str, StreamSubscription] = {}
        stream.subscribe(lambda _: None)

        def once(value):
            received.append(value)
            holder["subscription"].unsubscribe()

        holder["subscription"] = stream.subscribe(once)
        stream.emit(1)
        stream.emit(2)

        assert received == [1]

    @pytest.mark.unit
    def test_earlier_subscriber_cancelling_later_one_prevents_delivery(self):
        stream: EntityStream[int] = EntityStream()
        received: list[int] = []
        holder: dict[str, StreamSubscription] = {}

        stream.subscribe(lambda _: holder["late"].unsubscribe())
        holder["late"] = stream.subscribe(received.append)
        stream.emit(1)

        assert received == []


class TestEntityStreamDeliveryOrder:
    """Test cases for delivery order under re-entrant and concurrent producers."""

    @pytest.mark.unit
    def test_emission_from_callback_reaches_every_subscriber_after_current_value(self):
        stream: EntityStream[int] = EntityStream()
        first: list[int] = []
        second: list[int] = []

        def relay(value):
            first.append(value)
            if value == 1:
                stream.emit(2)

        stream.subscribe(relay)
        stream.subscribe(second.append)
        stream.emit(1)

        assert first == [1, 2]
        assert second == [1, 2]
        assert stream.latest == 2

    @pytest.mark.unit
    def test_completion_from_callback_follows_current_value(self):
        stream: EntityStream[int] = EntityStream()
        events: list[object] = []

        stream.subscribe(lambda value: stream.complete())
        stream.subscribe(events.append, on_complete=lambda: events.append("done"))
        stream.emit(1)

        assert events == [1, "done"]

    @pytest.mark.unit
    def test_concurrent_emit_waits_for_replay_to_new_subscriber(self):
        stream: EntityStream[str] = EntityStream()
        stream.emit("old")
        received: list[str] = []
        writers: list[threading.Thread] = []

        def on_next(value):
            if value == "old":
                writer = threading.Thread(target=stream.emit, args=("new",))
                writer.start()
                # The writer blocks until this replay has been delivered
                writer.join(timeout=0.2)
                writers.append(writer)
            received.append(value)

        stream.subscribe(on_next)
        for writer in writers:
            writer.join(timeout=5.0)

        assert received == ["old", "new"]

    @pytest.mark.unit
    def test_concurrent_emitters_deliver_same_order_to_every_subscriber(self):
        stream: EntityStream[int] = EntityStream()
        first: list[int] = []
        second: list[int] = []
        stream.subscribe(first.append)
        stream.subscribe(second.append)

        writers = [
            threading.Thread(target=lambda base=base: [stream.emit(base + i) for i in range(100)])
            for base in (0, 1000, 2000, 3000)
        ]
        for writer in writers:
            writer.start()
        for writer in writers:
            writer.join(timeout=5.0)

        assert len(first) == 400
        assert first == second


class TestEntityStreamActivation:
    """Test cases for attaching the backing source on the first subscriber."""

    @pytest.mark.unit
    def test_on_activate_runs_once_before_replay(self):
        activations: list[bool] = []

        def attach():
            activations.append(True)
            stream.emit("current")

        stream: EntityStream[str] = EntityStream(on_activate=attach)

        assert activations == []
        assert not stream.has_value

        first: list[str] = []
        second: list[str] = []
        stream.subscribe(first.append)
        stream.subscribe(second.append)

        assert activations == [True]
        assert first == ["current"]
        assert second == ["current"]

    @pytest.mark.unit
    def test_on_activate_skipped_for_terminated_stream(self):
        activations: list[bool] = []
        stream: EntityStream[int] = EntityStream(on_activate=lambda: activations.append(True))
        stream.complete()

        completed: list[bool] = []
        subscription = stream.subscribe(lambda _: None, on_complete=lambda: completed.append(True))

        assert activations == []
        assert completed == [True]
        assert subscription.closed

    @pytest.mark.unit
    def test_failing_on_activate_fails_stream(self):
        def attach():
            raise RuntimeError("source unavailable")

        stream: EntityStream[int] = EntityStream(on_activate=attach)
        errors: list[BaseException] = []

        subscription = stream.subscribe(lambda _: None, on_error=errors.append)

        assert [str(error) for error in errors] == ["source unavailable"]
        assert subscription.closed
        assert stream.is_disposed

    @pytest.mark.unit
    def test_shared_delivery_lock_is_used(self):
        lock = threading.RLock()
        stream: EntityStream[int] = EntityStream(delivery_lock=lock)
        held: list[bool] = []

        def on_next(_value):
            acquired: list[bool] = []
            other = threading.Thread(target=lambda: acquired.append(lock.acquire(blocking=False)))
            other.start()
            other.join()
            held.append(acquired == [False])

        stream.subscribe(on_next)
        stream.emit(1)

        assert held == [True]


class TestEntityStreamAsync:
    """Test cases for asyncio consumption."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_async_iteration_until_completion(self):
        stream: EntityStream[int] = EntityStream()

        async def produce():
            await asyncio.sleep(0)
            for value in (1, 2, 3):
                stream.emit(value)
            stream.complete()

        producer = asyncio.create_task(produce())
        received = [value async for value in stream]
        await producer

        assert received == [1, 2, 3]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_async_iteration_raises_stream_failure(self):
        stream: EntityStream[int] = EntityStream()
        stream.emit(1)
        stream.fail(RuntimeError("lost"))

        received: list[int] = []
        with pytest.raises(RuntimeError, match="lost"):
            async for value in stream:
                received.append(value)

        assert received == [1]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_first_returns_replayed_value(self):
        stream: EntityStream[str] = EntityStream()
        stream.emit("ready")

        assert await stream.first(timeout=1.0) == "ready"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_first_waits_for_emission(self):
        stream: EntityStream[str] = EntityStream()
        asyncio.get_running_loop().call_later(0.01, stream.emit, "later")

        assert await stream.first(timeout=1.0) == "later"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_first_on_empty_completed_stream_raises(self):
        stream: EntityStream[int] = EntityStream()
        stream.complete()

        with pytest.raises(StreamClosedError) as exc_info:
            await stream.first()

        assert exc_info.value.code == "STREAM_EMPTY"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_first_times_out_and_unsubscribes(self):
        disposed: list[bool] = []
        stream: EntityStream[int] = EntityStream(on_dispose=lambda: disposed.append(True))

        with pytest.raises(asyncio.TimeoutError):
            await stream.first(timeout=0.01)

        assert stream.subscriber_count == 0
        assert disposed == [True]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_emission_from_worker_thread_reaches_async_consumer(self):
        stream: EntityStream[int] = EntityStream()
        loop = asyncio.get_running_loop()

        def produce():
            stream.emit(42)

        pending = asyncio.ensure_future(stream.first(timeout=1.0))
        await asyncio.sleep(0)
        await loop.run_in_executor(None, produce)

        assert await pending == 42

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_leaving_async_for_releases_source_immediately(self):
        disposed: list[bool] = []
        stream: EntityStream[int] = EntityStream(on_dispose=lambda: disposed.append(True))
        stream.emit(1)

        async for value in stream:
            assert value == 1
            break

        assert stream.subscriber_count == 0
        assert disposed == [True]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_aclosing_releases_source_on_exit(self):
        disposed: list[bool] = []
        stream: EntityStream[int] = EntityStream(on_dispose=lambda: disposed.append(True))
        stream.emit(1)

        async with aclosing(aiter(stream)) as values:
            assert await anext(values) == 1
            assert stream.subscriber_count == 1

        assert stream.subscriber_count == 0
        assert disposed == [True]
        with pytest.raises(StopAsyncIteration):
            await anext(values)
