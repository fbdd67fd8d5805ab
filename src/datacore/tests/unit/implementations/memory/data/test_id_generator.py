# ABOUTME: Unit tests for identifier generator implementations
# ABOUTME: Tests UUID and sequential generators and the settings-driven factory

import threading

import pytest

from datacore.config import ProviderSettings
from datacore.exceptions import ConfigurationException
from datacore.implementations.memory.data.id_generator import (
    SequentialIdGenerator,
    UuidIdGenerator,
    create_id_generator,
)


class TestUuidIdGenerator:
    @pytest.mark.unit
    def test_generates_unique_hex_ids(self):
        generator = UuidIdGenerator()

        ids = {generator.generate() for _ in range(1000)}

        assert len(ids) == 1000
        assert all(len(value) == 32 for value in ids)
        assert all("/" not in value for value in ids)


class TestSequentialIdGenerator:
    @pytest.mark.unit
    def test_default_sequence(self):
        generator = SequentialIdGenerator()

        assert [generator.generate() for _ in range(3)] == ["1", "2", "3"]

    @pytest.mark.unit
    def test_prefix_start_and_width(self):
        generator = SequentialIdGenerator(prefix="task-", start=9, width=4)

        assert generator.prefix == "task-"
        assert [generator.generate() for _ in range(2)] == ["task-0009", "task-0010"]

    @pytest.mark.unit
    def test_width_is_a_minimum(self):
        generator = SequentialIdGenerator(start=1234, width=2)

        assert generator.generate() == "1234"

    @pytest.mark.unit
    @pytest.mark.parametrize("kwargs", [{"start": -1}, {"width": -1}])
    def test_rejects_negative_arguments(self, kwargs):
        with pytest.raises(ValueError, match="non-negative"):
            SequentialIdGenerator(**kwargs)

    @pytest.mark.unit
    def test_thread_safety(self):
        """Concurrent callers never receive the same identifier."""
        generator = SequentialIdGenerator()
        results: list[str] = []
        lock = threading.Lock()

        def worker():
            local = [generator.generate() for _ in range(200)]
            with lock:
                results.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 1600
        assert len(set(results)) == 1600


class TestCreateIdGenerator:
    @pytest.mark.unit
    @pytest.mark.config
    def test_uuid_strategy(self):
        generator = create_id_generator(ProviderSettings(ID_GENERATOR="uuid"))

        assert isinstance(generator, UuidIdGenerator)

    @pytest.mark.unit
    @pytest.mark.config
    def test_sequential_strategy_uses_settings(self):
        settings = ProviderSettings(ID_GENERATOR="sequential", SEQUENTIAL_ID_PREFIX="doc-", SEQUENTIAL_ID_START=5)

        generator = create_id_generator(settings)

        assert isinstance(generator, SequentialIdGenerator)
        assert generator.generate() == "doc-5"

    @pytest.mark.unit
    @pytest.mark.config
    def test_unknown_strategy_raises(self):
        settings = ProviderSettings.model_construct(ID_GENERATOR="snowflake")

        with pytest.raises(ConfigurationException) as exc_info:
            create_id_generator(settings)

        assert exc_info.value.code == "UNKNOWN_ID_GENERATOR"
        assert exc_info.value.details == {"id_generator": "snowflake"}
