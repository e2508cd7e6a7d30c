"""Test configuration for pytest."""
from unittest.mock import Mock

import pytest


def _broker(host, port):
    broker = Mock()
    broker.host = host
    broker.port = port
    return broker


def _partition(leader, replicas):
    partition = Mock()
    partition.leader = leader
    partition.replicas = list(replicas)
    return partition


@pytest.fixture
def cluster_metadata():
    """Factory for ClusterMetadata look-alikes.

    ``brokers`` maps broker id to (host, port); ``topics`` maps topic name to
    a mapping of partition id to (leader id, replica ids).
    """
    def build(controller_id=1, brokers=None, topics=None):
        metadata = Mock()
        metadata.controller_id = controller_id
        metadata.brokers = {
            broker_id: _broker(host, port)
            for broker_id, (host, port) in (brokers or {}).items()
        }
        metadata.topics = {}
        for name, partitions in (topics or {}).items():
            topic = Mock()
            topic.partitions = {
                partition_id: _partition(leader, replicas)
                for partition_id, (leader, replicas) in partitions.items()
            }
            metadata.topics[name] = topic
        return metadata

    return build


@pytest.fixture
def kafka_record():
    """Factory for confluent_kafka Message look-alikes returned by poll."""
    def build(offset, value=b"value", key=None, partition=0, timestamp_ms=0, headers=None, error=None):
        record = Mock()
        record.error.return_value = error
        record.partition.return_value = partition
        record.offset.return_value = offset
        record.key.return_value = key
        record.value.return_value = value
        record.timestamp.return_value = (1, timestamp_ms)
        record.headers.return_value = headers
        return record

    return build


@pytest.fixture
def output():
    """Collects console output as a list of written fragments."""
    class Output(list):
        @property
        def text(self):
            return "".join(self)

    return Output()
