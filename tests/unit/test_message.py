"""
Unit tests for the default message generator.
"""

from types import SimpleNamespace

import pytest
from starlette.datastructures import URL

from kafka_middleware.config import MiddlewareConfig
from kafka_middleware.message import generate


@pytest.mark.unit
class TestDefaultMessage:
    """Test the default message generator."""

    @pytest.mark.asyncio
    async def test_describes_exchange(self):
        """Test request and response attributes are captured."""
        config = MiddlewareConfig(producer={"topic": "requests"})
        request = SimpleNamespace(
            method="GET",
            url=URL("http://testserver/items?page=2"),
            query_params={"page": "2"},
            headers={"accept": "application/json"},
            client=SimpleNamespace(host="10.0.0.1", port=5000),
        )
        response = SimpleNamespace(status_code=200)

        message = await generate(config, request, response)

        assert message["topic"] == "requests"
        assert message["method"] == "GET"
        assert message["url"] == "http://testserver/items?page=2"
        assert message["path"] == "/items"
        assert message["query"] == {"page": "2"}
        assert message["headers"] == {"accept": "application/json"}
        assert message["client"] == "10.0.0.1"
        assert message["status_code"] == 200
        assert isinstance(message["timestamp"], int)

    @pytest.mark.asyncio
    async def test_tolerates_bare_objects(self):
        """Test missing attributes are reported as None or empty."""
        config = MiddlewareConfig(producer={"topic": "requests"})

        message = await generate(config, object(), None)

        assert message["method"] is None
        assert message["url"] is None
        assert message["path"] is None
        assert message["query"] == {}
        assert message["headers"] == {}
        assert message["client"] is None
        assert message["status_code"] is None
