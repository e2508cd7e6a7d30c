"""Bounded consumption of topics under a read strategy."""
import logging
from collections.abc import Callable, Iterator
from contextlib import closing
from datetime import datetime, timezone

from confluent_kafka import Consumer, KafkaException

from kafkascope.config import ConnectConfig
from kafkascope.consumers.strategies import ReadStrategy
from kafkascope.exceptions import ReadTerminatedError
from kafkascope.models import Message, ReadResult

logger = logging.getLogger(__name__)


def to_message(record) -> Message:
    """Convert a confluent_kafka message into a Message."""
    _, timestamp_ms = record.timestamp()
    headers = {
        name: value.decode("utf-8", errors="replace") if value is not None else ""
        for name, value in (record.headers() or [])
    }

    return Message(
        partition=record.partition(),
        offset=record.offset(),
        key=record.key() or b"",
        value=record.value() or b"",
        timestamp=datetime.fromtimestamp(max(timestamp_ms, 0) / 1000, tz=timezone.utc),
        headers=headers,
    )


class BoundedReader:
    """Reads topics message by message, stopping where the strategy says so.

    Reads have no deadline: an empty poll simply polls again, so an unbounded
    read only ends when the caller stops iterating or the client fails.
    """

    def __init__(
        self,
        bootstrap_servers: list[str],
        connect_config: ConnectConfig | None = None,
        poll_timeout: float = 1.0,
    ):
        """Initialize the reader.

        Args:
            bootstrap_servers: Kafka bootstrap servers
            connect_config: Security and timeout settings
            poll_timeout: Seconds each poll waits before polling again
        """
        self.bootstrap_servers = list(bootstrap_servers)
        self.connect_config = connect_config or ConnectConfig()
        self.poll_timeout = poll_timeout

    def _consumer_config(self, strategy: ReadStrategy) -> dict:
        config = {"bootstrap.servers": ",".join(self.bootstrap_servers)}
        config.update(self.connect_config.to_confluent_config())
        config.update(strategy.consumer_config())
        return config

    def messages(self, strategy: ReadStrategy) -> Iterator[Message]:
        """Lazily yield the messages the strategy accepts.

        The sequence ends right after the message that completes the
        strategy's bound, without polling further. A message the strategy
        rejects also ends it, without being yielded. The consumer is closed
        however the sequence ends.

        Raises:
            ReadTerminatedError: If the client reports an error
        """
        context = strategy.describe()
        log_context = {"topic": strategy.topic, "read": context}

        logger.info(f"Reading from topic '{strategy.topic}' ({context})", extra=log_context)
        try:
            consumer = Consumer(self._consumer_config(strategy))
        except KafkaException as e:
            raise ReadTerminatedError(strategy.topic, context, e) from e

        try:
            try:
                strategy.attach(consumer, self.connect_config.timeout_seconds)
            except KafkaException as e:
                raise ReadTerminatedError(strategy.topic, context, e) from e

            while True:
                try:
                    record = consumer.poll(self.poll_timeout)
                except KafkaException as e:
                    raise ReadTerminatedError(strategy.topic, context, e) from e

                if record is None:
                    continue

                if record.error():
                    raise ReadTerminatedError(strategy.topic, context, KafkaException(record.error()))

                message = to_message(record)
                bound = {**log_context, "partition": message.partition, "offset": message.offset}
                if not strategy.accepts(message):
                    logger.info(f"Read from topic '{strategy.topic}' passed its bound", extra=bound)
                    return

                yield message

                if strategy.exhausted(message):
                    logger.info(f"Read from topic '{strategy.topic}' reached its bound", extra=bound)
                    return
        finally:
            try:
                consumer.close()
            except (KafkaException, RuntimeError) as e:
                logger.warning(f"Error closing reader: {e}", extra=log_context)

    def read(self, strategy: ReadStrategy, read_func: Callable[[Message], bool]) -> None:
        """Pass each accepted message to ``read_func`` until it returns False.

        Raises:
            ReadTerminatedError: If the client reports an error
        """
        with closing(self.messages(strategy)) as messages:
            for message in messages:
                if not read_func(message):
                    return

    def results(self, strategy: ReadStrategy) -> Iterator[ReadResult]:
        """Like ``messages`` but the terminal error is yielded as the last result."""
        with closing(self.messages(strategy)) as messages:
            try:
                for message in messages:
                    yield ReadResult(message=message)
            except ReadTerminatedError as e:
                yield ReadResult(error=e)
