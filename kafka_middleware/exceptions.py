"""Custom exceptions for the kafka_middleware package."""

from typing import Any


class KafkaMiddlewareError(Exception):
    """Base class for errors raised by kafka_middleware."""

    pass


class ConfigurationError(KafkaMiddlewareError, ValueError):
    """Raised when the middleware configuration is invalid at construction time."""

    pass


class PublishError(KafkaMiddlewareError):
    """Raised by host adapters to forward a per-request fault to the host framework."""

    def __init__(self, error: Any):
        self.error = error
        super().__init__(f"Kafka middleware pipeline failed: {error}")
