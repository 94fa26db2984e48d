"""
Configuration models for the Kafka publishing middleware.
"""

from typing import Any, Callable, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from kafka_middleware.exceptions import ConfigurationError

DEFAULT_URL = "localhost:9092"
DEFAULT_CLIENT_ID = "kafka-middleware"


class KafkaSettings(BaseSettings):
    """Environment driven defaults for the middleware (``KAFKA_*`` variables)."""

    url: str = Field(default=DEFAULT_URL, description="Kafka bootstrap servers")
    client_id: str = Field(default=DEFAULT_CLIENT_ID, description="Client id reported to the brokers")
    topic: Optional[str] = Field(default=None, description="Topic receiving one message per request")
    partition: int = Field(default=0, description="Partition for unkeyed messages")
    attributes: int = Field(default=0, description="Compression attribute code")
    parse_to_json: bool = Field(default=True, description="Serialize non-string messages and keys to JSON")
    producer_settings: Dict[str, Any] = Field(
        default_factory=dict,
        description="librdkafka producer properties passed through verbatim",
    )

    model_config = {
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "KAFKA_",
        "extra": "ignore",
    }


class ProducerOptions(BaseModel):
    """Where and how every derived message is published."""

    model_config = ConfigDict(frozen=True)

    topic: str = Field(..., min_length=1, description="Kafka topic name")
    settings: Dict[str, Any] = Field(
        default_factory=dict,
        description="Producer tuning parameters, opaque to the middleware",
    )
    partition: int = Field(default=0, ge=0, description="Target partition")
    attributes: int = Field(default=0, ge=0, description="Compression attribute code")


class ConnectionParams(BaseModel):
    """Parameters for a connection the middleware builds itself."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(default=DEFAULT_URL, description="Kafka bootstrap servers")
    client_id: str = Field(default=DEFAULT_CLIENT_ID, description="Client id reported to the brokers")


class PrebuiltConnection(BaseModel):
    """A connection handle constructed by the caller and reused as is."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    handle: Any = Field(..., description="Already constructed connection")


ConnectionSpec = Union[ConnectionParams, PrebuiltConnection]


class MiddlewareConfig(BaseModel):
    """Complete configuration consumed once by ``create_middleware``."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    producer: ProducerOptions
    parse_to_json: bool = Field(default=True, description="Serialize non-string messages and keys to JSON")
    client: ConnectionSpec = Field(default_factory=ConnectionParams)
    message: Optional[Callable[..., Any]] = Field(default=None, description="Custom message generator")
    key: Optional[Callable[..., Any]] = Field(default=None, description="Custom key generator")
    error: Optional[Callable[..., Any]] = Field(default=None, description="Custom error handler")

    @field_validator("client", mode="before")
    @classmethod
    def tag_connection(cls, value: Any) -> Any:
        """Read mappings as connection parameters and anything else as a pre-built handle."""
        if value is None:
            return ConnectionParams()
        if isinstance(value, (ConnectionParams, PrebuiltConnection)):
            return value
        if isinstance(value, Mapping):
            return ConnectionParams(**value)
        return PrebuiltConnection(handle=value)

    @classmethod
    def from_env(cls, **overrides: Any) -> "MiddlewareConfig":
        """
        Build a configuration from ``KAFKA_*`` environment variables.

        Args:
            **overrides: Top-level fields replacing the environment values
                (typically the ``message``, ``key`` and ``error`` callables)

        Returns:
            Validated configuration
        """
        settings = KafkaSettings()
        data: Dict[str, Any] = {
            "producer": {
                "topic": settings.topic,
                "settings": settings.producer_settings,
                "partition": settings.partition,
                "attributes": settings.attributes,
            },
            "parse_to_json": settings.parse_to_json,
            "client": {"url": settings.url, "client_id": settings.client_id},
        }
        data.update(overrides)
        return load_config(data)


def load_config(config: Union[MiddlewareConfig, Mapping[str, Any], None]) -> MiddlewareConfig:
    """
    Validate a configuration before anything touches the broker.

    Args:
        config: Configuration model or plain mapping

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the configuration is missing or has no ``producer.topic``
    """
    if isinstance(config, MiddlewareConfig):
        return config
    if not config:
        raise ConfigurationError("Missing configuration: producer.topic is required")

    producer = config.get("producer") if isinstance(config, Mapping) else None
    if isinstance(producer, Mapping):
        topic = producer.get("topic")
    else:
        topic = getattr(producer, "topic", None)
    if not topic:
        raise ConfigurationError("Invalid configuration: producer.topic is required")

    try:
        return MiddlewareConfig.model_validate(dict(config))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid middleware configuration: {e}") from e
