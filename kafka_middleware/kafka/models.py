"""
Data models for Kafka publishing.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class KeyedMessage(BaseModel):
    """A message value paired with the key used to route it to a partition."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: Any = Field(..., description="Kafka message key")
    value: Any = Field(..., description="Kafka message value")


class SendRequest(BaseModel):
    """One unit handed to the producer's ``send`` operation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    topic: str = Field(..., description="Kafka topic name")
    messages: Any = Field(..., description="Message, or keyed message when a key is present")
    partition: int = Field(default=0, description="Target partition")
    attributes: int = Field(default=0, description="Compression attribute code")
    key: Optional[Any] = Field(default=None, description="Kafka message key, only set for keyed messages")

    @property
    def has_key(self) -> bool:
        """Whether the request was built with a key."""
        return "key" in self.model_fields_set

    def to_payload(self) -> Dict[str, Any]:
        """
        Plain dict view of the request; unkeyed requests carry no ``key`` entry.

        Returns:
            Dictionary with topic, messages, partition, attributes and optional key
        """
        return self.model_dump(exclude_unset=True)
