"""Aggregation of flat partition metadata into topic and broker views."""
from collections.abc import Iterable

from kafkascope.models import Broker, Leader, Partition, PartitionRecord, Topic, TopicSummary


def summarize_topics(records: Iterable[PartitionRecord]) -> dict[str, TopicSummary]:
    """Build a topic name to summary mapping.

    Partitions are counted per topic. Replica count and leader are taken from
    the last partition seen, as they are expected to be the same across the
    partitions of a topic.
    """
    topics: dict[str, TopicSummary] = {}

    for record in records:
        summary = topics.setdefault(record.topic, TopicSummary(name=record.topic))
        summary.partitions += 1
        summary.replicas = record.replicas
        summary.leader = Leader(
            id=record.leader_id,
            host=record.leader_host,
            port=record.leader_port,
        )

    return topics


def group_by_leader(records: Iterable[PartitionRecord]) -> dict[str, Broker]:
    """Build a broker host to broker mapping, nesting topics and partitions.

    Only brokers leading at least one partition appear: a partition is
    attributed to its leader and partitions without a leader are left out.
    """
    brokers: dict[str, Broker] = {}

    for record in records:
        if not record.has_leader:
            continue

        broker = brokers.get(record.leader_host)
        if broker is None:
            broker = Broker(host=record.leader_host, port=record.leader_port)
            brokers[record.leader_host] = broker

        topic = broker.topics.setdefault(record.topic, Topic(name=record.topic))
        topic.partitions.setdefault(record.partition, Partition(id=record.partition))

    return brokers
