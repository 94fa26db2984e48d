"""
Unit tests for message and key resolvers.
"""

import pytest

from kafka_middleware.config import MiddlewareConfig
from kafka_middleware.resolvers import (
    AbsentKeyResolver,
    DefaultMessageResolver,
    FunctionResolver,
    Resolver,
    build_key_resolver,
    build_message_resolver,
)


@pytest.fixture
def config():
    """Configuration without generators."""
    return MiddlewareConfig(producer={"topic": "requests"})


@pytest.mark.unit
class TestResolverSelection:
    """Test resolver selection at configuration time."""

    def test_default_message_resolver(self, config, static_message_generator):
        """Test the default generator is used without a message function."""
        resolver = build_message_resolver(config, static_message_generator)

        assert isinstance(resolver, DefaultMessageResolver)
        assert resolver.generator is static_message_generator

    def test_custom_message_resolver(self, static_message_generator):
        """Test the message function wins over the default generator."""

        def message(request, response):
            return "custom"

        config = MiddlewareConfig(producer={"topic": "requests"}, message=message)

        resolver = build_message_resolver(config, static_message_generator)

        assert isinstance(resolver, FunctionResolver)
        assert resolver.func is message

    def test_absent_key_resolver(self, config):
        """Test no key function means no key."""
        assert isinstance(build_key_resolver(config), AbsentKeyResolver)

    def test_custom_key_resolver(self):
        """Test the key function is used when provided."""

        def key(request, response):
            return "k"

        config = MiddlewareConfig(producer={"topic": "requests"}, key=key)

        resolver = build_key_resolver(config)

        assert isinstance(resolver, FunctionResolver)
        assert resolver.func is key


@pytest.mark.unit
class TestResolve:
    """Test resolver outcomes."""

    @pytest.mark.asyncio
    async def test_function_receives_request_and_response(self, request_obj, response_obj):
        """Test custom functions get the exact request/response objects."""
        seen = []

        def message(request, response):
            seen.append((request, response))
            return "custom"

        result = await FunctionResolver(message, "message").resolve(request_obj, response_obj)

        assert result == (None, "custom")
        assert seen[0][0] is request_obj
        assert seen[0][1] is response_obj

    @pytest.mark.asyncio
    async def test_async_function(self, request_obj, response_obj):
        """Test coroutine functions are awaited."""

        async def key(request, response):
            return "async-key"

        assert await FunctionResolver(key, "key").resolve(request_obj, response_obj) == (None, "async-key")

    @pytest.mark.asyncio
    async def test_function_error(self, request_obj, response_obj):
        """Test exceptions become the error of the outcome."""

        def message(request, response):
            raise RuntimeError("boom")

        error, value = await FunctionResolver(message, "message").resolve(request_obj, response_obj)

        assert isinstance(error, RuntimeError)
        assert value is None

    @pytest.mark.asyncio
    async def test_default_generator_arguments(self, config, request_obj, response_obj):
        """Test the default generator receives config, request and response."""
        seen = []

        async def generate(cfg, request, response):
            seen.append((cfg, request, response))
            return {"path": "/"}

        result = await DefaultMessageResolver(config, generate).resolve(request_obj, response_obj)

        assert result == (None, {"path": "/"})
        assert seen == [(config, request_obj, response_obj)]

    @pytest.mark.asyncio
    async def test_default_generator_error(self, config, request_obj, response_obj):
        """Test default generator failures become errors."""

        async def generate(cfg, request, response):
            raise ValueError("cannot describe request")

        error, value = await DefaultMessageResolver(config, generate).resolve(request_obj, response_obj)

        assert isinstance(error, ValueError)
        assert value is None

    @pytest.mark.asyncio
    async def test_absent_key(self, request_obj, response_obj):
        """Test the absent key outcome is not an error."""
        assert await AbsentKeyResolver().resolve(request_obj, response_obj) == (None, None)


@pytest.mark.unit
class TestResolverInterface:
    """Test the Resolver base class."""

    def test_base_class_is_abstract(self):
        """Test Resolver cannot be instantiated without resolve."""
        with pytest.raises(TypeError):
            Resolver()
