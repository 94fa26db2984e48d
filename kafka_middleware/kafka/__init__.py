"""
Kafka module for building and publishing send requests.
"""

from .models import KeyedMessage, SendRequest
from .payload import build_send_request
from .producer import KafkaProducer
from .connection import KafkaBroker, KafkaConnection
from .publisher import Publisher, generate

__all__ = [
    "KeyedMessage",
    "SendRequest",
    "build_send_request",
    "KafkaProducer",
    "KafkaBroker",
    "KafkaConnection",
    "Publisher",
    "generate",
]
