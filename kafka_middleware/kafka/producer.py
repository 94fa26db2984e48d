"""
Kafka producer wrapper delivering send requests with acknowledgment callbacks.
"""

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from confluent_kafka import KafkaException, Producer
import orjson

from kafka_middleware.kafka.models import KeyedMessage, SendRequest

if TYPE_CHECKING:
    from kafka_middleware.kafka.connection import KafkaConnection

logger = logging.getLogger(__name__)

# Attribute codes as carried on send requests
COMPRESSION_CODECS = {
    0: "none",
    1: "gzip",
    2: "snappy",
    3: "lz4",
    4: "zstd",
}

SendCallback = Callable[[Optional[Any]], None]


def _encode(value: Any) -> Optional[bytes]:
    if value is None or isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    return orjson.dumps(value, default=lambda obj: float(obj) if hasattr(obj, "__float__") else str(obj))


class _BatchAck:
    """Collects delivery reports for one batch and fires the callback once."""

    def __init__(self, expected: int, callback: SendCallback):
        self._pending = expected
        self._error: Optional[Any] = None
        self._callback = callback
        self._lock = threading.Lock()

    def report(self, err: Optional[Any]) -> None:
        with self._lock:
            if err is not None and self._error is None:
                self._error = err
            self._pending -= 1
            done = self._pending == 0
        if done:
            self._callback(self._error)


class KafkaProducer:
    """Asynchronous-acknowledgment Kafka producer shared by every request."""

    def __init__(
        self,
        connection: "KafkaConnection",
        settings: Optional[Dict[str, Any]] = None,
        poll_interval: float = 0.1,
        flush_timeout: float = 10.0,
    ):
        """
        Initialize Kafka producer.

        Args:
            connection: Connection providing bootstrap servers and client id
            settings: librdkafka producer properties, left untouched
            poll_interval: Seconds the poll thread waits for delivery events
            flush_timeout: Timeout for the final flush on close, in seconds
        """
        self.connection = connection
        self.settings = settings if settings is not None else {}
        self.poll_interval = poll_interval
        self.flush_timeout = flush_timeout
        self._producer = Producer({**connection.config, **self.settings})
        self._compression = str(self.settings.get("compression.type", self.settings.get("compression.codec", "none")))
        self._warned_attributes: set = set()
        self._success_count = 0
        self._error_count = 0
        self._metrics_lock = threading.Lock()
        self._running = threading.Event()
        self._poll_thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the background thread serving delivery callbacks."""
        if self._running.is_set():
            logger.warning("Producer poll thread already running")
            return
        self._running.set()
        self._poll_thread = threading.Thread(target=self._poll_loop, name="kafka-middleware-poll", daemon=True)
        self._poll_thread.start()
        logger.info(f"Kafka producer started for brokers: {getattr(self.connection, 'url', self.connection)}")

    def _poll_loop(self) -> None:
        while self._running.is_set():
            try:
                self._producer.poll(self.poll_interval)
            except Exception as e:
                # Raised out of a delivery callback; keep serving the others
                logger.exception(f"Unexpected error while polling for delivery reports: {e}")

    def _count(self, success: bool) -> None:
        with self._metrics_lock:
            if success:
                self._success_count += 1
            else:
                self._error_count += 1

    def send(self, payloads: List[SendRequest], callback: SendCallback) -> None:
        """
        Produce a batch of send requests.

        ``callback`` is invoked exactly once, after every request in the batch has
        been acknowledged, with the first delivery error or ``None``. Errors raised
        while enqueueing are reported the same way rather than raised.

        Args:
            payloads: Send requests to produce
            callback: Acknowledgment callback taking the error or None
        """
        if not payloads:
            callback(None)
            return

        ack = _BatchAck(len(payloads), callback)

        for payload in payloads:
            self._check_attributes(payload.attributes)

            def delivery_callback(err, msg, _payload=payload):
                """Callback for delivery reports."""
                if err is not None:
                    logger.error(f"Message delivery to '{_payload.topic}' failed: {err}")
                    self._count(success=False)
                else:
                    logger.debug(f"Message delivered to {msg.topic()} [{msg.partition()}] @ {msg.offset()}")
                    self._count(success=True)
                ack.report(err)

            try:
                record = self._record(payload)
            except (TypeError, ValueError) as e:
                logger.error(f"Failed to encode message for topic '{payload.topic}': {e}")
                self._count(success=False)
                ack.report(e)
                continue

            try:
                self._producer.produce(**record, on_delivery=delivery_callback)
            except (BufferError, KafkaException) as e:
                logger.error(f"Failed to enqueue message for topic '{payload.topic}': {e}")
                self._count(success=False)
                ack.report(e)

        # Serve callbacks that are already due
        self._producer.poll(0)

    def _record(self, payload: SendRequest) -> Dict[str, Any]:
        if isinstance(payload.messages, KeyedMessage):
            # Keyed messages are routed by the partitioner hashing the key
            return {
                "topic": payload.topic,
                "key": _encode(payload.messages.key),
                "value": _encode(payload.messages.value),
            }
        return {
            "topic": payload.topic,
            "value": _encode(payload.messages),
            "partition": payload.partition,
        }

    def _check_attributes(self, attributes: int) -> None:
        if attributes == 0 or attributes in self._warned_attributes:
            return
        codec = COMPRESSION_CODECS.get(attributes)
        if codec is None:
            logger.warning(f"Unknown compression attribute code {attributes}")
        elif codec != self._compression:
            logger.warning(
                f"Attribute code {attributes} asks for '{codec}' compression but the producer "
                f"is configured with '{self._compression}'"
            )
        else:
            return
        self._warned_attributes.add(attributes)

    def get_metrics(self) -> Dict[str, Any]:
        """
        Get producer metrics.

        Returns:
            Dictionary containing producer metrics
        """
        with self._metrics_lock:
            sent, failed = self._success_count, self._error_count
        total = sent + failed
        return {
            "messages_sent": sent,
            "messages_failed": failed,
            "success_rate": sent / total if total > 0 else 0,
        }

    def close(self) -> None:
        """Stop the poll thread and flush queued messages."""
        self._running.clear()
        if self._poll_thread is not None:
            self._poll_thread.join(timeout=self.poll_interval * 10)
            self._poll_thread = None

        remaining = self._producer.flush(timeout=self.flush_timeout)
        if remaining > 0:
            logger.warning(f"Closed producer with {remaining} messages still in queue")

        logger.info(f"Kafka producer closed. Sent: {self._success_count}, Failed: {self._error_count}")

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
