"""
Send request construction for the Kafka publisher.
"""

from typing import Any

import orjson

from kafka_middleware.config import ProducerOptions
from kafka_middleware.kafka.models import KeyedMessage, SendRequest


def _default(obj: Any) -> Any:
    # Decimal and friends
    if hasattr(obj, "__float__"):
        return float(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def encode_value(value: Any, parse_to_json: bool = True) -> Any:
    """
    Apply the serialization policy to a message or key.

    Args:
        value: Message or key as produced by the application
        parse_to_json: Serialize non-string values to a JSON string when True

    Returns:
        The value unchanged if it is already a string (or bytes) or serialization
        is disabled, otherwise its JSON encoding as ``str``
    """
    if isinstance(value, (str, bytes)) or not parse_to_json:
        return value
    return orjson.dumps(value, default=_default).decode("utf-8")


def build_send_request(
    message: Any,
    key: Any,
    options: ProducerOptions,
    parse_to_json: bool = True,
) -> SendRequest:
    """
    Normalize a message/key pair into the send request a producer expects.

    A falsy key (``None``, ``""``, ``0``, empty collections) means no key: the
    message is sent bare and the request carries no ``key`` field at all.

    Args:
        message: Message derived for the request
        key: Routing key, or a falsy value for none
        options: Producer options holding topic, partition and attributes
        parse_to_json: Serialization policy shared by message and key

    Returns:
        A fresh SendRequest
    """
    value = encode_value(message, parse_to_json)

    if not key:
        return SendRequest(
            topic=options.topic,
            messages=value,
            partition=options.partition,
            attributes=options.attributes,
        )

    encoded_key = encode_value(key, parse_to_json)
    return SendRequest(
        topic=options.topic,
        messages=KeyedMessage(key=encoded_key, value=value),
        partition=options.partition,
        attributes=options.attributes,
        key=encoded_key,
    )
