"""Synchronous record writer backed by the Confluent Kafka producer."""
import logging
from typing import Optional

from confluent_kafka import KafkaException
from confluent_kafka import Producer as ConfluentProducer

from kafkascope.config import ConnectConfig
from kafkascope.exceptions import WriteFailedError
from kafkascope.producers.base import RecordWriter

logger = logging.getLogger(__name__)


class TopicWriter(RecordWriter):
    """Writes records one at a time, waiting for each delivery report."""

    def __init__(
        self,
        bootstrap_servers: list[str],
        topic: str,
        connect_config: ConnectConfig | None = None,
        keyed: bool = False,
    ):
        """Initialize the topic writer.

        Args:
            bootstrap_servers: Kafka bootstrap servers
            topic: Topic to write to
            connect_config: Security and timeout settings
            keyed: Whether records are partitioned by key hash, otherwise
                keys are not sent and records are spread over partitions
        """
        super().__init__(topic, keyed)
        self.connect_config = connect_config or ConnectConfig()

        producer_config = {"bootstrap.servers": ",".join(bootstrap_servers)}
        producer_config.update(self.connect_config.to_confluent_config())
        if keyed:
            # same partition for a key as the Java client
            producer_config["partitioner"] = "murmur2_random"

        self._producer = ConfluentProducer(producer_config)

    def write(
        self,
        key: bytes,
        value: bytes,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """Write one record and wait for its delivery report.

        Args:
            key: Record key, ignored when the writer is not keyed
            value: Record value
            headers: Optional record headers

        Raises:
            WriteFailedError: If the record was rejected or not delivered in time
        """
        if self._producer is None:
            raise WriteFailedError(self.topic, "writer is closed")

        delivery: dict = {}

        def on_delivery(err, msg):
            delivery["error"] = err
            delivery["message"] = msg

        try:
            self._producer.produce(
                topic=self.topic,
                key=key if self.keyed and key else None,
                value=value,
                headers=list(headers.items()) if headers else None,
                on_delivery=on_delivery,
            )
            remaining = self._producer.flush(self.connect_config.timeout_seconds)
        except (KafkaException, BufferError) as e:
            raise WriteFailedError(self.topic, e) from e

        if remaining > 0 or "message" not in delivery:
            raise WriteFailedError(self.topic, "timed out waiting for delivery")
        if delivery["error"] is not None:
            raise WriteFailedError(self.topic, KafkaException(delivery["error"]))

        msg = delivery["message"]
        logger.debug(
            f"Record delivered to {msg.topic()} [partition {msg.partition()}] at offset {msg.offset()}",
            extra={"topic": self.topic}
        )

    def close(self) -> None:
        """Flush pending records and release the producer."""
        if self._producer is not None:
            remaining = self._producer.flush(self.connect_config.timeout_seconds)
            # Note: ConfluentProducer doesn't have a close method
            self._producer = None
            if remaining > 0:
                raise WriteFailedError(self.topic, f"{remaining} records still queued at close")
