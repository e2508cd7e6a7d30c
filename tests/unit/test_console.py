"""Tests for attended and unattended output."""
from datetime import datetime, timezone

import pytest

from kafkascope.console import Console
from kafkascope.models import Broker, Leader, Message, Partition, Topic, TopicSummary


@pytest.fixture
def brokers():
    orders = Topic("orders", {0: Partition(0), 2: Partition(2)})
    return {
        "broker-2": Broker("broker-2", 9093, {"audit": Topic("audit", {0: Partition(0)})}),
        "broker-1": Broker("broker-1", 9092, {"orders": orders}),
    }


def message(key=b"", headers=None):
    return Message(
        partition=1,
        offset=5,
        key=key,
        value=b"hello",
        timestamp=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        headers=headers or {},
    )


class TestConsole:
    """Test rendering in both modes."""

    def test_describe_attended(self, output, brokers):
        Console(write=output.append).describe(brokers, ["broker-1:9092"])

        assert output.text == (
            "describing cluster using bootstrap servers: 'broker-1:9092'\n\n"
            "broker: broker-1:9092\n"
            "> topic: orders\n"
            "  > partition: 0\n"
            "  > partition: 2\n"
            "broker: broker-2:9093\n"
            "> topic: audit\n"
            "  > partition: 0\n"
        )

    def test_describe_no_brokers(self, output):
        Console(write=output.append).describe({}, ["broker-1:9092"])

        assert "no brokers found" in output.text

    def test_describe_unattended(self, output, brokers):
        Console(write=output.append, unattended=True).describe(brokers, ["broker-1:9092"])

        assert output.text.splitlines() == [
            "broker topic partition",
            "broker-1:9092 orders 0",
            "broker-1:9092 orders 2",
            "broker-2:9093 audit 0",
        ]

    def test_topics_attended(self, output):
        topics = {
            "orders": TopicSummary("orders", 6, 3, Leader(1, "broker-1", 9092)),
            "audit": TopicSummary("audit", 1, 1),
        }

        Console(write=output.append).topics(topics)

        assert output.text.splitlines() == [
            "topic: audit (partitions: 1, replicas: 1, leader: none)",
            "topic: orders (partitions: 6, replicas: 3, leader: broker-1:9092)",
        ]

    def test_topics_unattended(self, output):
        topics = {"orders": TopicSummary("orders"), "audit": TopicSummary("audit")}

        Console(write=output.append, unattended=True, delimiter=",").topics(topics)

        assert output.text == "audit,orders,"

    def test_message_attended(self, output):
        console = Console(write=output.append)

        assert console.message(message()) is True
        assert output.text == "[1/5 @ 02-01-2024 03:04:05]> [unset] : hello\n"

    def test_message_attended_with_key_and_headers(self, output):
        Console(write=output.append).message(message(key=b"k1", headers={"source": "cli"}))

        assert output.text == "[1/5 @ 02-01-2024 03:04:05]> k1 : hello source=cli\n"

    def test_message_unattended(self, output):
        console = Console(write=output.append, unattended=True, delimiter="|")

        console.message(message(key=b"k1"))

        assert output.text == "hello|"

    def test_reading_banner_attended_only(self, output):
        Console(write=output.append, unattended=True).reading("reading from topic 'orders'")
        assert output == []

        Console(write=output.append).reading("reading from topic 'orders'")
        assert output.text == "reading from topic 'orders'...\n\n"

    def test_failed_goes_to_error_sink(self, output):
        errors = []
        Console(write=output.append, write_err=errors.append).failed("unable to list topics")

        assert output == []
        assert errors == ["unable to list topics. see log for details\n"]

    def test_failed_unattended_is_silent(self, output):
        Console(write=output.append, unattended=True).failed("unable to list topics")

        assert output == []

    def test_date_format(self, output):
        Console(write=output.append, date_format="%Y-%m-%dT%H:%M:%S").message(message())

        assert "@ 2024-01-02T03:04:05]" in output.text
