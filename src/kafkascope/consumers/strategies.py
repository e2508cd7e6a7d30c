"""Read strategies: where a read starts and how long it continues.

Each strategy picks the consumer group, attaches a consumer to its start
position and decides, message by message, whether the read goes on.
"""
import os
import random
import socket
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from confluent_kafka import OFFSET_BEGINNING, Consumer, KafkaException, TopicPartition

from kafkascope.exceptions import InvalidArgumentError
from kafkascope.models import Message


def unique_group_id(prefix: str = "kafkascope") -> str:
    """Synthesize a consumer group name no other process is using."""
    hostname = socket.gethostname() or "localhost"
    user = os.getenv("USER", "unknown")
    return f"{prefix}-{hostname}-{user}-{random.getrandbits(63)}"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ReadStrategy(ABC):
    """Base class for the four ways of reading a topic."""

    topic: str

    @property
    @abstractmethod
    def group(self) -> str:
        """Consumer group the reader joins."""

    @property
    def commits_offsets(self) -> bool:
        return False

    @property
    def auto_offset_reset(self) -> str:
        return "earliest"

    def consumer_config(self) -> dict[str, Any]:
        return {
            "group.id": self.group,
            "auto.offset.reset": self.auto_offset_reset,
            "enable.auto.commit": self.commits_offsets,
            "enable.partition.eof": False,
        }

    @abstractmethod
    def attach(self, consumer: Consumer, timeout: float) -> None:
        """Assign or subscribe the consumer at the strategy's start position."""

    def accepts(self, message: Message) -> bool:
        """Continuation predicate: whether the read goes on with this message."""
        return True

    def exhausted(self, message: Message) -> bool:
        """Whether the read is complete once this message has been delivered."""
        return False

    @abstractmethod
    def describe(self) -> str:
        """Human readable description of the read, used in logs and errors."""


@dataclass
class OffsetBound(ReadStrategy):
    """Read one partition from an offset up to and including an upper offset."""

    topic: str
    partition: int = 0
    from_offset: int = 0
    to_offset: Optional[int] = None
    _group: str = field(default_factory=lambda: f"kafkascope-range-{uuid.uuid4().hex}", repr=False)

    @property
    def group(self) -> str:
        return self._group

    def attach(self, consumer: Consumer, timeout: float) -> None:
        # 0 starts wherever the partition starts
        start = self.from_offset if self.from_offset > 0 else OFFSET_BEGINNING
        consumer.assign([TopicPartition(self.topic, self.partition, start)])

    def accepts(self, message: Message) -> bool:
        return self.to_offset is None or message.offset <= self.to_offset

    def exhausted(self, message: Message) -> bool:
        return self.to_offset is not None and message.offset >= self.to_offset

    def describe(self) -> str:
        to = "end" if self.to_offset is None else self.to_offset
        return f"partition {self.partition}, offsets {self.from_offset} to {to}"


@dataclass
class TimeBound(ReadStrategy):
    """Read one partition from the first message at or after a time up to a later time."""

    topic: str
    from_time: datetime
    partition: int = 0
    to_time: Optional[datetime] = None
    _group: str = field(default_factory=lambda: f"kafkascope-time-{uuid.uuid4().hex}", repr=False)

    def __post_init__(self):
        self.from_time = _as_utc(self.from_time)
        if self.to_time is not None:
            self.to_time = _as_utc(self.to_time)

    @property
    def group(self) -> str:
        return self._group

    def attach(self, consumer: Consumer, timeout: float) -> None:
        timestamp_ms = int(self.from_time.timestamp() * 1000)
        positions = consumer.offsets_for_times(
            [TopicPartition(self.topic, self.partition, timestamp_ms)],
            timeout=timeout
        )
        for position in positions:
            if position.error:
                raise KafkaException(position.error)
        # A time past the last message resolves to the end offset
        consumer.assign(positions)

    def accepts(self, message: Message) -> bool:
        return self.to_time is None or message.timestamp <= self.to_time

    def describe(self) -> str:
        to = "end" if self.to_time is None else self.to_time.isoformat()
        return f"partition {self.partition}, time {self.from_time.isoformat()} to {to}"


@dataclass
class GroupJoin(ReadStrategy):
    """Read all partitions as a member of a named, durable consumer group."""

    topic: str
    group_name: str

    def __post_init__(self):
        if not self.group_name:
            raise InvalidArgumentError("consumer group", "a group id is required")

    @property
    def group(self) -> str:
        return self.group_name

    @property
    def commits_offsets(self) -> bool:
        return True

    def attach(self, consumer: Consumer, timeout: float) -> None:
        consumer.subscribe([self.topic])

    def describe(self) -> str:
        return f"consumer group {self.group_name}"


@dataclass
class ExclusiveJoin(ReadStrategy):
    """Read all partitions as the only member of a freshly synthesized group.

    Being alone in the group, the reader is assigned every partition. With
    ``from_beginning`` it sees each partition's whole backlog, otherwise only
    records written after it joined.
    """

    topic: str
    from_beginning: bool = True
    _group: str = field(default_factory=unique_group_id, repr=False)

    @property
    def group(self) -> str:
        return self._group

    @property
    def auto_offset_reset(self) -> str:
        return "earliest" if self.from_beginning else "latest"

    def attach(self, consumer: Consumer, timeout: float) -> None:
        consumer.subscribe([self.topic])

    def describe(self) -> str:
        scope = "all records" if self.from_beginning else "new records"
        return f"exclusive group {self._group}, {scope}"
