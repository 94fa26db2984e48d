"""
Resolvers deriving the message and the routing key for a request.

Each resolver returns an ``(error, value)`` pair instead of raising, so the
middleware can short-circuit on the first failure.
"""

from abc import ABC, abstractmethod
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple

from kafka_middleware.config import MiddlewareConfig

logger = logging.getLogger(__name__)

Resolution = Tuple[Optional[Any], Any]
MessageGenerator = Callable[[MiddlewareConfig, Any, Any], Awaitable[Any]]


async def call_maybe_async(func: Callable[..., Any], *args: Any) -> Any:
    """Call ``func`` and await the result when it is awaitable."""
    result = func(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class Resolver(ABC):
    """Base class for message and key resolvers."""

    @abstractmethod
    async def resolve(self, request: Any, response: Any) -> Resolution:
        """Return ``(error, value)`` for the request/response pair."""


class FunctionResolver(Resolver):
    """Resolves through a user-supplied ``func(request, response)``."""

    def __init__(self, func: Callable[..., Any], name: str):
        self.func = func
        self.name = name

    async def resolve(self, request: Any, response: Any) -> Resolution:
        try:
            value = await call_maybe_async(self.func, request, response)
        except Exception as e:
            logger.debug(f"Custom {self.name} generator failed: {e}")
            return e, None
        return None, value


class DefaultMessageResolver(Resolver):
    """Resolves through the default message generator."""

    def __init__(self, config: MiddlewareConfig, generator: MessageGenerator):
        self.config = config
        self.generator = generator

    async def resolve(self, request: Any, response: Any) -> Resolution:
        try:
            value = await call_maybe_async(self.generator, self.config, request, response)
        except Exception as e:
            logger.debug(f"Default message generator failed: {e}")
            return e, None
        return None, value


class AbsentKeyResolver(Resolver):
    """No key configured: every message is published unkeyed."""

    async def resolve(self, request: Any, response: Any) -> Resolution:
        return None, None


def build_message_resolver(config: MiddlewareConfig, generator: MessageGenerator) -> Resolver:
    """
    Select the message resolver once, at configuration time.

    Args:
        config: Middleware configuration
        generator: Default message generator used when ``config.message`` is unset

    Returns:
        Resolver for the message
    """
    if config.message is not None:
        return FunctionResolver(config.message, "message")
    return DefaultMessageResolver(config, generator)


def build_key_resolver(config: MiddlewareConfig) -> Resolver:
    """
    Select the key resolver once, at configuration time.

    Args:
        config: Middleware configuration

    Returns:
        Resolver for the routing key
    """
    if config.key is not None:
        return FunctionResolver(config.key, "key")
    return AbsentKeyResolver()
