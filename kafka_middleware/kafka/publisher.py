"""
Kafka publisher turning message/key pairs into acknowledged sends.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from kafka_middleware.config import ProducerOptions
from kafka_middleware.kafka.payload import build_send_request

logger = logging.getLogger(__name__)

PublishFn = Callable[[Any, Any], Awaitable[Optional[Any]]]


def _settle(future: asyncio.Future, error: Optional[Any]) -> None:
    if not future.done():
        future.set_result(error)


class Publisher:
    """Publishes one send request per call through a shared producer."""

    def __init__(self, producer: Any, options: ProducerOptions, parse_to_json: bool = True):
        """
        Initialize the publisher.

        Args:
            producer: Handle exposing ``send(payloads, callback)``
            options: Topic, partition and attributes for every send request
            parse_to_json: Serialize non-string messages and keys to JSON
        """
        self.producer = producer
        self.options = options
        self.parse_to_json = parse_to_json

    async def publish(self, message: Any, key: Any = None) -> Optional[Any]:
        """
        Publish ``message`` and wait for the broker acknowledgment.

        Broker-reported errors are returned, never raised, and are not
        interpreted or retried.

        Args:
            message: Message derived for the request
            key: Routing key, falsy for none

        Returns:
            The broker-reported error, or None on success
        """
        try:
            send_request = build_send_request(message, key, self.options, self.parse_to_json)
        except TypeError as e:
            logger.error(f"Failed to serialize message for topic '{self.options.topic}': {e}")
            return e

        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def on_ack(error: Optional[Any]) -> None:
            # May run on the producer's poll thread
            try:
                loop.call_soon_threadsafe(_settle, future, error)
            except RuntimeError:
                logger.warning(f"Dropped acknowledgment for topic '{self.options.topic}': event loop is closed")

        try:
            self.producer.send([send_request], on_ack)
        except Exception as e:
            logger.error(f"Failed to send message to topic '{self.options.topic}': {e}")
            return e
        return await future


def generate(producer: Any, options: ProducerOptions, parse_to_json: bool = True) -> PublishFn:
    """
    Bind a producer and its options into a publish coroutine function.

    Args:
        producer: Handle exposing ``send(payloads, callback)``
        options: Producer options
        parse_to_json: Serialization policy for messages and keys

    Returns:
        ``publish(message, key)`` coroutine function
    """
    return Publisher(producer, options, parse_to_json).publish
