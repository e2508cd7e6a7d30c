"""Data model shared by the connection, topology, reader and producer layers."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class PartitionRecord:
    """One partition as reported by a metadata read."""

    topic: str
    partition: int
    replicas: int
    leader_id: int
    leader_host: str = ""
    leader_port: int = 0

    @property
    def has_leader(self) -> bool:
        return self.leader_id >= 0 and bool(self.leader_host)


@dataclass
class Partition:
    id: int


@dataclass
class Topic:
    name: str
    partitions: dict[int, Partition] = field(default_factory=dict)


@dataclass
class Broker:
    """A broker that leads at least one partition, with the topics it leads."""

    host: str
    port: int
    topics: dict[str, Topic] = field(default_factory=dict)


@dataclass
class Leader:
    id: int = -1
    host: str = ""
    port: int = 0


@dataclass
class TopicSummary:
    """Topic as seen by the lifecycle operations."""

    name: str
    partitions: int = 0
    replicas: int = 0
    leader: Leader = field(default_factory=Leader)


@dataclass(frozen=True)
class Message:
    """A record read from a topic partition."""

    partition: int
    offset: int
    key: bytes
    value: bytes
    timestamp: datetime
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ReadResult:
    """Either a message or the error that ended the read sequence."""

    message: Optional[Message] = None
    error: Optional[Exception] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None
