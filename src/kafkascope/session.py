"""Cluster session: the single entry point to every kafkascope operation."""
import logging
from collections.abc import Callable, Iterator
from datetime import datetime
from typing import Optional

from kafkascope.config import ConnectConfig
from kafkascope.connection import ClusterConnection, resolve_connection
from kafkascope.consumers import BoundedReader, ExclusiveJoin, GroupJoin, OffsetBound, ReadStrategy, TimeBound
from kafkascope.models import Broker, Message, TopicSummary
from kafkascope.producers import TopicWriter
from kafkascope.topics import TopicManager
from kafkascope.topology import group_by_leader

logger = logging.getLogger(__name__)

ReadFunc = Callable[[Message], bool]


class ClusterSession:
    """Owns the connection to one cluster for the duration of a command.

    The controller connection is resolved on first use by an administrative
    operation; readers and writers bootstrap from the configured servers.
    Sessions share no state, so several may coexist.
    """

    def __init__(
        self,
        bootstrap_servers: list[str],
        connect_config: ConnectConfig | None = None,
        resolver: Callable[[list[str], ConnectConfig], ClusterConnection] = resolve_connection,
    ):
        """Initialize the session.

        Args:
            bootstrap_servers: Ordered host:port addresses
            connect_config: Security and timeout settings
            resolver: Function connecting to the cluster controller
        """
        self.bootstrap_servers = list(bootstrap_servers)
        self.connect_config = connect_config or ConnectConfig()
        self._resolver = resolver
        self._connection: Optional[ClusterConnection] = None

    @property
    def connection(self) -> ClusterConnection:
        if self._connection is None:
            self._connection = self._resolver(self.bootstrap_servers, self.connect_config)
        return self._connection

    @property
    def topic_manager(self) -> TopicManager:
        return TopicManager(self.connection)

    # Topology and lifecycle

    def describe(self) -> dict[str, Broker]:
        """Brokers leading at least one partition, with the topics they lead."""
        return group_by_leader(self.connection.read_partitions())

    def topics(self) -> dict[str, TopicSummary]:
        return self.topic_manager.list_topics()

    def create_topic(self, topic: str, partitions: int, replicas: int) -> None:
        self.topic_manager.create_topic(topic, num_partitions=partitions, replication_factor=replicas)

    def delete_topic(self, topic: str) -> None:
        self.topic_manager.delete_topic(topic)

    # Production

    def writer(self, topic: str, keyed: bool = False) -> TopicWriter:
        return TopicWriter(self.bootstrap_servers, topic, self.connect_config, keyed=keyed)

    def publish(
        self,
        topic: str,
        key: str,
        value: str,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """Write a single keyed record with optional headers."""
        with self.writer(topic, keyed=True) as writer:
            writer.write(key.encode("utf-8"), value.encode("utf-8"), headers)

    # Consumption

    @property
    def reader(self) -> BoundedReader:
        return BoundedReader(self.bootstrap_servers, self.connect_config)

    def messages(self, strategy: ReadStrategy) -> Iterator[Message]:
        return self.reader.messages(strategy)

    def read(self, strategy: ReadStrategy, read_func: ReadFunc) -> None:
        self.reader.read(strategy, read_func)

    def read_range(
        self,
        topic: str,
        from_offset: int,
        to_offset: Optional[int],
        partition: int,
        read_func: ReadFunc,
    ) -> None:
        self.read(OffsetBound(topic, partition, from_offset, to_offset), read_func)

    def read_time(
        self,
        topic: str,
        from_time: datetime,
        to_time: Optional[datetime],
        partition: int,
        read_func: ReadFunc,
    ) -> None:
        self.read(TimeBound(topic, from_time, partition, to_time), read_func)

    def read_group(self, topic: str, group: str, read_func: ReadFunc) -> None:
        self.read(GroupJoin(topic, group), read_func)

    def read_exclusive(self, topic: str, read_func: ReadFunc, from_beginning: bool = True) -> str:
        """Read every partition of a topic as the sole member of a new group.

        Returns:
            The synthesized consumer group name
        """
        strategy = ExclusiveJoin(topic, from_beginning=from_beginning)
        self.read(strategy, read_func)
        return strategy.group

    def close(self) -> None:
        """Release the controller connection, if one was opened."""
        if self._connection is not None:
            try:
                self._connection.close()
            except Exception as e:
                logger.warning(f"Error closing connection: {e}")
            self._connection = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
