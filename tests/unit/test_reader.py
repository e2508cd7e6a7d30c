"""Tests for bounded topic reads."""
from datetime import datetime, timezone
from unittest.mock import Mock, patch

import pytest
from confluent_kafka import Consumer, KafkaException, TopicPartition
from confluent_kafka.error import KafkaError

from kafkascope.config import ConnectConfig
from kafkascope.consumers import BoundedReader, ExclusiveJoin, GroupJoin, OffsetBound, TimeBound
from kafkascope.consumers.reader import to_message
from kafkascope.exceptions import ReadTerminatedError


class TestToMessage:
    """Test conversion of client records."""

    def test_fields(self, kafka_record):
        record = kafka_record(
            7, value=b"hello", key=b"k1", partition=2,
            timestamp_ms=1709294400000, headers=[("source", b"cli"), ("empty", None)],
        )

        message = to_message(record)

        assert message.partition == 2
        assert message.offset == 7
        assert message.key == b"k1"
        assert message.value == b"hello"
        assert message.timestamp == datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert message.headers == {"source": "cli", "empty": ""}

    def test_missing_key_and_value(self, kafka_record):
        message = to_message(kafka_record(0, value=None, key=None))

        assert message.key == b""
        assert message.value == b""
        assert message.headers == {}


class TestBoundedReader:
    """Test the read loop."""

    @pytest.fixture
    def consumer_mock(self):
        return Mock(spec=Consumer)

    @pytest.fixture
    def consumer_cls(self, consumer_mock):
        with patch("kafkascope.consumers.reader.Consumer", return_value=consumer_mock) as mock:
            yield mock

    @pytest.fixture
    def reader(self):
        return BoundedReader(["broker-1:9092", "broker-2:9092"], ConnectConfig(api_key="key", api_secret="secret"))

    def test_consumer_config(self, reader, consumer_cls, consumer_mock):
        consumer_mock.poll.side_effect = KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            list(reader.messages(GroupJoin("orders", "billing")))

        config = consumer_cls.call_args[0][0]
        assert config["bootstrap.servers"] == "broker-1:9092,broker-2:9092"
        assert config["group.id"] == "billing"
        assert config["sasl.username"] == "key"
        consumer_mock.close.assert_called_once()

    def test_offset_range_stops_after_upper_bound(self, reader, consumer_cls, consumer_mock, kafka_record):
        """Offsets 0 to 2 yield three messages and stop at offset 3."""
        consumer_mock.poll.side_effect = [
            None,
            kafka_record(0),
            kafka_record(1),
            None,
            kafka_record(2),
        ]

        messages = list(reader.messages(OffsetBound("orders", 0, 0, 2)))

        assert [m.offset for m in messages] == [0, 1, 2]
        # nothing is polled after the last offset of the range
        assert consumer_mock.poll.call_count == 5
        consumer_mock.close.assert_called_once()

    def test_offset_range_over_compacted_gap(self, reader, consumer_cls, consumer_mock, kafka_record):
        """A gap past the upper bound ends the read without yielding."""
        consumer_mock.poll.side_effect = [kafka_record(0), kafka_record(1), kafka_record(5)]

        messages = list(reader.messages(OffsetBound("orders", 0, 0, 3)))

        assert [m.offset for m in messages] == [0, 1]
        assert consumer_mock.poll.call_count == 3
        consumer_mock.close.assert_called_once()

    def test_read_callback_stops_read(self, reader, consumer_cls, consumer_mock, kafka_record):
        consumer_mock.poll.side_effect = [kafka_record(offset) for offset in range(10)]
        seen = []

        def read_func(message):
            seen.append(message.offset)
            return len(seen) < 2

        reader.read(ExclusiveJoin("orders"), read_func)

        assert seen == [0, 1]
        consumer_mock.close.assert_called_once()

    def test_error_record_terminates(self, reader, consumer_cls, consumer_mock, kafka_record):
        consumer_mock.poll.side_effect = [
            kafka_record(0),
            kafka_record(1, error=KafkaError(KafkaError.UNKNOWN_TOPIC_OR_PART, "Unknown topic")),
        ]
        seen = []

        with pytest.raises(ReadTerminatedError) as exc_info:
            for message in reader.messages(ExclusiveJoin("orders")):
                seen.append(message.offset)

        assert seen == [0]
        assert exc_info.value.topic == "orders"
        consumer_mock.close.assert_called_once()

    def test_attach_failure_terminates(self, reader, consumer_cls, consumer_mock):
        consumer_mock.subscribe.side_effect = KafkaException(KafkaError(-1, "Subscribe failed"))

        with pytest.raises(ReadTerminatedError):
            list(reader.messages(ExclusiveJoin("orders")))

        consumer_mock.close.assert_called_once()

    def test_consumer_creation_failure_terminates(self, reader):
        with patch("kafkascope.consumers.reader.Consumer",
                   side_effect=KafkaException(KafkaError(-1, "Invalid sasl.mechanism"))):
            with pytest.raises(ReadTerminatedError) as exc_info:
                list(reader.messages(ExclusiveJoin("orders")))

        assert exc_info.value.topic == "orders"

    def test_time_lookup_failure_terminates(self, reader, consumer_cls, consumer_mock):
        position = Mock(spec=TopicPartition)
        position.error = KafkaError(KafkaError.UNKNOWN_TOPIC_OR_PART, "Unknown partition")
        consumer_mock.offsets_for_times.return_value = [position]

        with pytest.raises(ReadTerminatedError) as exc_info:
            list(reader.messages(TimeBound("orders", datetime(2024, 3, 1, tzinfo=timezone.utc))))

        assert exc_info.value.topic == "orders"
        consumer_mock.assign.assert_not_called()
        consumer_mock.poll.assert_not_called()
        consumer_mock.close.assert_called_once()

    def test_close_failure_is_logged(self, reader, consumer_cls, consumer_mock, kafka_record):
        consumer_mock.poll.side_effect = [kafka_record(0), kafka_record(1)]
        consumer_mock.close.side_effect = RuntimeError("Consumer closed")

        messages = list(reader.messages(OffsetBound("orders", to_offset=0)))

        assert len(messages) == 1

    def test_results_end_with_error(self, reader, consumer_cls, consumer_mock, kafka_record):
        consumer_mock.poll.side_effect = [
            kafka_record(0),
            kafka_record(1, error=KafkaError(-1, "Broker down")),
        ]

        results = list(reader.results(ExclusiveJoin("orders")))

        assert len(results) == 2
        assert results[0].message.offset == 0
        assert not results[0].is_error
        assert results[1].is_error
        assert isinstance(results[1].error, ReadTerminatedError)
