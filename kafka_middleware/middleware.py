"""
Middleware factory publishing a Kafka message for every intercepted request.

The returned handler runs a linear pipeline per request:

1. resolve the message,
2. resolve the routing key,
3. publish and wait for the broker acknowledgment,
4. on any failure, dispatch the error.

The first failing stage short-circuits to error dispatch. A configured
``error`` handler receives ``(error, request, response, next)`` and owns the
continuation; without one the handler calls ``next(error)`` itself.
"""

import logging
from typing import Any, Callable, Mapping, Optional, Union

from kafka_middleware.config import ConnectionParams, MiddlewareConfig, PrebuiltConnection, load_config
from kafka_middleware.kafka.connection import KafkaBroker
from kafka_middleware.kafka.publisher import Publisher
from kafka_middleware import message as default_message
from kafka_middleware.resolvers import (
    MessageGenerator,
    Resolver,
    build_key_resolver,
    build_message_resolver,
    call_maybe_async,
)

logger = logging.getLogger(__name__)


class PublishMiddleware:
    """Request handler ``(request, response, next)`` built by ``create_middleware``."""

    def __init__(
        self,
        config: MiddlewareConfig,
        message_resolver: Resolver,
        key_resolver: Resolver,
        publisher: Publisher,
        producer: Any,
    ):
        self.config = config
        self.message_resolver = message_resolver
        self.key_resolver = key_resolver
        self.publisher = publisher
        self.producer = producer

    async def __call__(self, request: Any, response: Any, next: Callable[..., Any]) -> Any:
        key = None
        error, message = await self.message_resolver.resolve(request, response)

        if error is None:
            error, key = await self.key_resolver.resolve(request, response)

        if error is None:
            error = await self.publisher.publish(message, key)

        if error is None:
            return await call_maybe_async(next)

        return await self._dispatch_error(error, request, response, next)

    async def _dispatch_error(self, error: Any, request: Any, response: Any, next: Callable[..., Any]) -> Any:
        if self.config.error is not None:
            return await call_maybe_async(self.config.error, error, request, response, next)

        logger.error(f"Failed to publish request message to '{self.config.producer.topic}': {error}")
        return await call_maybe_async(next, error)


def _connect(config: MiddlewareConfig, broker: Any) -> Any:
    client = config.client
    if isinstance(client, PrebuiltConnection):
        logger.info("Using provided Kafka connection")
        return client.handle
    if isinstance(client, ConnectionParams):
        return broker.connect(client.url, client.client_id)
    raise TypeError(f"Unsupported client connection: {type(client).__name__}")


def create_middleware(
    config: Union[MiddlewareConfig, Mapping[str, Any], None] = None,
    *,
    broker: Optional[Any] = None,
    message_generator: Optional[MessageGenerator] = None,
) -> PublishMiddleware:
    """
    Validate the configuration, bootstrap the producer and build the handler.

    Args:
        config: Middleware configuration, as a model or a plain mapping
        broker: Collaborator exposing ``connect`` and ``create_producer``;
            defaults to the confluent-kafka backed ``KafkaBroker``
        message_generator: Default message generator used when the
            configuration has no ``message`` function

    Returns:
        Handler to invoke as ``await handler(request, response, next)``

    Raises:
        ConfigurationError: If the configuration has no ``producer.topic``
    """
    config = load_config(config)
    broker = broker if broker is not None else KafkaBroker()
    generator = message_generator if message_generator is not None else default_message.generate

    connection = _connect(config, broker)
    producer = broker.create_producer(connection, config.producer.settings)
    logger.info(f"Kafka middleware publishing to topic '{config.producer.topic}'")

    return PublishMiddleware(
        config=config,
        message_resolver=build_message_resolver(config, generator),
        key_resolver=build_key_resolver(config),
        publisher=Publisher(producer, config.producer, config.parse_to_json),
        producer=producer,
    )
