"""Terminal and pipe output for kafkascope.

Attended, output is meant for an operator at a terminal. Unattended, only
the data itself is written so that stdout can be piped into another
command; progress and failures go to the log alone.
"""
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional

import click

from kafkascope.config import DEFAULT_DATE_FORMAT
from kafkascope.models import Broker, Message, TopicSummary

logger = logging.getLogger(__name__)


def _echo(text: str) -> None:
    click.echo(text, nl=False)


def _echo_err(text: str) -> None:
    click.echo(text, nl=False, err=True)


class Console:
    """Renders results and prompts, honouring attended/unattended mode."""

    def __init__(
        self,
        write: Optional[Callable[[str], None]] = None,
        write_err: Optional[Callable[[str], None]] = None,
        date_format: str = DEFAULT_DATE_FORMAT,
        unattended: bool = False,
        delimiter: str = "\n",
    ):
        """Initialize the console.

        Args:
            write: Sink for text, defaults to stdout without newline handling
            write_err: Sink for failures, defaults to stderr, or to ``write``
                when only that is given
            date_format: strftime format used for message timestamps
            unattended: Whether stdin/stdout are not interactive
            delimiter: Separator written after each value when unattended
        """
        self._write = write or _echo
        self._write_err = write_err or write or _echo_err
        self.date_format = date_format
        self.unattended = unattended
        self.delimiter = delimiter

    def write(self, text: str) -> None:
        self._write(text)

    def attended(self, text: str) -> None:
        """Write text only when an operator is watching."""
        if not self.unattended:
            self._write(text)

    def failed(self, what: str) -> None:
        if not self.unattended:
            self._write_err(f"{what}. see log for details\n")

    # Cluster and topics

    def describe(self, brokers: dict[str, Broker], bootstrap_servers: list[str]) -> None:
        if self.unattended:
            self.write("broker topic partition\n")
            for host, broker in sorted(brokers.items()):
                for name, topic in sorted(broker.topics.items()):
                    for partition_id in sorted(topic.partitions):
                        self.write(f"{host}:{broker.port} {name} {partition_id}\n")
            return

        self.write(f"describing cluster using bootstrap servers: '{','.join(bootstrap_servers)}'\n\n")

        if not brokers:
            self.write("> no brokers found. (brokers not acting as leader for at least one partition are not listed)\n\n")

        for host, broker in sorted(brokers.items()):
            self.write(f"broker: {host}:{broker.port}\n")
            for name, topic in sorted(broker.topics.items()):
                self.write(f"> topic: {name}\n")
                for partition_id in sorted(topic.partitions):
                    self.write(f"  > partition: {partition_id}\n")

    def topics(self, topics: dict[str, TopicSummary]) -> None:
        if self.unattended:
            for name in sorted(topics):
                self.write(f"{name}{self.delimiter}")
            return

        if not topics:
            self.write("> no topics found\n")

        for name, summary in sorted(topics.items()):
            leader = f"{summary.leader.host}:{summary.leader.port}" if summary.leader.host else "none"
            self.write(
                f"topic: {name} (partitions: {summary.partitions}, "
                f"replicas: {summary.replicas}, leader: {leader})\n"
            )

    def created(self, topic: str) -> None:
        self.write(f"created topic '{topic}'\n")

    def deleted(self, topic: str) -> None:
        self.write(f"deleted topic '{topic}'\n")

    # Reading

    def reading(self, banner: str) -> None:
        """Announce a read: logged always, shown only when attended."""
        logger.info(banner)
        self.attended(f"{banner}...\n\n")

    def format_time(self, value: datetime) -> str:
        return value.strftime(self.date_format)

    def message(self, message: Message) -> bool:
        """Render one message; usable directly as a read callback."""
        value = message.value.decode("utf-8", errors="replace")

        if self.unattended:
            self.write(f"{value}{self.delimiter}")
            return True

        key = message.key.decode("utf-8", errors="replace") or "[unset]"
        timestamp = self.format_time(message.timestamp)
        line = f"[{message.partition}/{message.offset} @ {timestamp}]> {key} : {value}"
        if message.headers:
            line += " " + ",".join(f"{k}={v}" for k, v in sorted(message.headers.items()))
        self.write(line + "\n")
        return True

    # Writing

    def write_prompt(self, topic: str) -> None:
        self.attended(f"enter data to publish to topic '{topic}'. enter X to exit:\n> ")

    def key_prompt(self, first: bool) -> None:
        if first:
            self.attended("enter key (empty uses 'default')> ")
        else:
            self.attended("enter key (empty uses previous) > ")

    def written(self, value: str, topic: str) -> None:
        self.attended(f"wrote [{value} > {topic}]\n> ")

    def published(self, topic: str, key: str) -> None:
        self.attended(f"wrote record with key '{key or '[unset]'}' to topic '{topic}'\n")
