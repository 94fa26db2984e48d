"""
Kafka connection handle and the broker collaborator used by the middleware.
"""

import logging
from typing import Any, Dict, Optional

from kafka_middleware.kafka.producer import KafkaProducer

logger = logging.getLogger(__name__)


class KafkaConnection:
    """Connection parameters shared by every producer bound to it."""

    def __init__(self, url: str, client_id: str):
        self.url = url
        self.client_id = client_id

    @property
    def config(self) -> Dict[str, Any]:
        """librdkafka properties identifying the cluster and this client."""
        return {
            "bootstrap.servers": self.url,
            "client.id": self.client_id,
        }

    def __repr__(self) -> str:
        return f"KafkaConnection(url={self.url!r}, client_id={self.client_id!r})"


class KafkaBroker:
    """Builds connections and producers backed by confluent-kafka."""

    def connect(self, url: str, client_id: str) -> KafkaConnection:
        """
        Create a connection handle.

        Args:
            url: Kafka bootstrap servers
            client_id: Client id reported to the brokers

        Returns:
            Connection handle
        """
        connection = KafkaConnection(url, client_id)
        logger.info(f"Connecting to Kafka brokers {url} as '{client_id}'")
        return connection

    def create_producer(self, connection: Any, settings: Optional[Dict[str, Any]]) -> KafkaProducer:
        """
        Create and start a producer bound to ``connection``.

        Args:
            connection: Handle returned by ``connect`` or supplied by the caller
            settings: Producer properties, passed through verbatim

        Returns:
            Started producer
        """
        producer = KafkaProducer(connection, settings)
        producer.start()
        return producer
