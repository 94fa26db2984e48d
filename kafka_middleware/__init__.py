"""
Kafka publishing middleware: one broker message per intercepted request.
"""

from .config import (
    ConnectionParams,
    KafkaSettings,
    MiddlewareConfig,
    PrebuiltConnection,
    ProducerOptions,
    load_config,
)
from .exceptions import ConfigurationError, KafkaMiddlewareError, PublishError
from .middleware import PublishMiddleware, create_middleware

__all__ = [
    "ConnectionParams",
    "KafkaSettings",
    "MiddlewareConfig",
    "PrebuiltConnection",
    "ProducerOptions",
    "load_config",
    "ConfigurationError",
    "KafkaMiddlewareError",
    "PublishError",
    "PublishMiddleware",
    "create_middleware",
]
