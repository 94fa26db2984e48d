"""
Shared pytest fixtures and configuration for all tests.
"""

import pytest

from kafka_middleware.config import ProducerOptions
from tests.utils.mocks import Continuation, MockBroker, MockProducer


# ============= Configuration Fixtures =============


@pytest.fixture
def middleware_config():
    """Plain mapping configuration with connection parameters."""
    return {
        "producer": {
            "topic": "test",
            "settings": {"acks": 1},
        },
        "client": {
            "url": "1.2.3.4",
            "client_id": "client-id",
        },
    }


@pytest.fixture
def producer_options():
    """Producer options for the publish tests."""
    return ProducerOptions(topic="my-topic")


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Mock environment variables for testing."""
    test_env = {
        "KAFKA_URL": "test-kafka:9092",
        "KAFKA_CLIENT_ID": "test-client",
        "KAFKA_TOPIC": "test-requests",
        "KAFKA_PARTITION": "3",
        "KAFKA_ATTRIBUTES": "2",
        "KAFKA_PARSE_TO_JSON": "false",
        "KAFKA_PRODUCER_SETTINGS": '{"acks": "all", "linger.ms": 5}',
    }

    for key, value in test_env.items():
        monkeypatch.setenv(key, value)

    return test_env


# ============= Broker Fixtures =============


@pytest.fixture
def mock_producer():
    """Mock producer acknowledging every send successfully."""
    return MockProducer()


@pytest.fixture
def mock_broker(mock_producer):
    """Mock broker handing out ``mock_producer``."""
    return MockBroker(producer=mock_producer)


# ============= Pipeline Fixtures =============


@pytest.fixture
def request_obj():
    """Opaque request object."""
    return object()


@pytest.fixture
def response_obj():
    """Opaque response object."""
    return object()


@pytest.fixture
def next_fn():
    """Recording continuation."""
    return Continuation()


@pytest.fixture
def static_message_generator():
    """Default message generator stub returning a fixed message."""

    async def generate(config, request, response):
        return "generated"

    return generate


# ============= Pytest Configuration =============


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test (no external dependencies)")
    config.addinivalue_line("markers", "integration: mark test as integration test (host framework in process)")
