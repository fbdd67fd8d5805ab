# ABOUTME: pytest configuration for datacore tests
# ABOUTME: Configures timeouts and shared entity, converter and provider fixtures

import pytest
import pytest_asyncio

from datacore.config import configure_for_testing
from datacore.implementations.memory.data import (
    InMemoryDataProvider,
    ModelEntityConverter,
    SequentialIdGenerator,
)
from datacore.interfaces.data.converter import EntityConverterConfig
from tests.fixtures.entities import Note, Task


def pytest_configure(config):
    """Configure pytest for datacore tests."""
    config.addinivalue_line("markers", "unit: Unit tests with 20-second timeout")
    config.addinivalue_line("markers", "integration: Integration tests with 60-second timeout")
    config.addinivalue_line("markers", "contract: Contract tests with 60-second timeout")

    # DEBUG-level console sink, captured per test
    configure_for_testing()


def pytest_collection_modifyitems(config, items):
    """Modify test items to add appropriate timeouts based on test type."""
    for item in items:
        # Respect an explicit timeout marker
        if item.get_closest_marker("timeout"):
            continue

        if item.get_closest_marker("unit"):
            item.add_marker(pytest.mark.timeout(20))
        elif any(item.get_closest_marker(mark) for mark in ["integration", "contract"]):
            item.add_marker(pytest.mark.timeout(60))


@pytest.fixture
def task_converter():
    return ModelEntityConverter(Task)


@pytest.fixture
def note_converter():
    return ModelEntityConverter(Note)


@pytest.fixture
def converter_configs(task_converter, note_converter):
    return [
        EntityConverterConfig(type_key="task", converter=task_converter),
        EntityConverterConfig(type_key="note", converter=note_converter),
    ]


@pytest.fixture
def id_generator():
    return SequentialIdGenerator(prefix="id-", width=3)


@pytest_asyncio.fixture
async def provider(converter_configs, id_generator):
    """An in-memory provider with task and note converters, closed after the test."""
    provider = InMemoryDataProvider(converter_configs, id_generator, name="TestProvider")
    yield provider
    await provider.close()
