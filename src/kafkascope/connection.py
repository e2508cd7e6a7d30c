"""Resolution of a bootstrap server list into a connection to the cluster controller."""
import logging
from typing import Any

from confluent_kafka import KafkaException
from confluent_kafka.admin import AdminClient

from kafkascope.config import ConnectConfig
from kafkascope.exceptions import ConnectionUnavailableError, InvalidArgumentError
from kafkascope.models import PartitionRecord

logger = logging.getLogger(__name__)


def dial(address: str, connect_config: ConnectConfig) -> tuple[AdminClient, Any]:
    """Open an admin client bound to a single address and check that it answers.

    Args:
        address: host:port of the broker to dial
        connect_config: Security and timeout settings

    Returns:
        The admin client and the cluster metadata it returned

    Raises:
        KafkaException: If the broker does not answer within the dial timeout
    """
    admin_config = {"bootstrap.servers": address}
    admin_config.update(connect_config.to_confluent_config())

    admin_client = AdminClient(admin_config)
    metadata = admin_client.list_topics(timeout=connect_config.timeout_seconds)
    return admin_client, metadata


class ClusterConnection:
    """A live admin connection to the cluster controller.

    Owned by a single session for the duration of one command.
    """

    def __init__(
        self,
        admin_client: AdminClient,
        host: str,
        port: int,
        bootstrap_servers: list[str],
        connect_config: ConnectConfig,
    ):
        self._admin_client = admin_client
        self.host = host
        self.port = port
        self.bootstrap_servers = list(bootstrap_servers)
        self.connect_config = connect_config

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def admin_client(self) -> AdminClient:
        if self._admin_client is None:
            raise ConnectionUnavailableError(
                f"Connection to controller {self.address} is closed", [self.address]
            )
        return self._admin_client

    def read_partitions(self) -> list[PartitionRecord]:
        """Read the partition metadata of every topic on the cluster.

        Every call fetches fresh metadata from the controller.

        Returns:
            Partition records ordered by topic name and partition id

        Raises:
            ConnectionUnavailableError: If the metadata read fails
        """
        try:
            metadata = self.admin_client.list_topics(timeout=self.connect_config.timeout_seconds)
        except KafkaException as e:
            raise ConnectionUnavailableError(
                f"Error reading cluster info from controller {self.address}",
                [self.address],
                e
            ) from e

        records = []
        for topic_name, topic_metadata in metadata.topics.items():
            for partition_id, partition_metadata in topic_metadata.partitions.items():
                leader_id = partition_metadata.leader
                broker = metadata.brokers.get(leader_id) if leader_id >= 0 else None
                records.append(PartitionRecord(
                    topic=topic_name,
                    partition=partition_id,
                    replicas=len(partition_metadata.replicas),
                    leader_id=leader_id,
                    leader_host=broker.host if broker else "",
                    leader_port=broker.port if broker else 0,
                ))

        records.sort(key=lambda r: (r.topic, r.partition))
        logger.debug(
            f"Read {len(records)} partitions from controller",
            extra={"address": self.address}
        )
        return records

    def close(self) -> None:
        """Release the controller connection."""
        if self._admin_client is None:
            return
        # AdminClient has no close method; dropping it stops its threads
        self._admin_client = None
        logger.debug("Released controller connection", extra={"address": self.address})

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def resolve_connection(
    bootstrap_servers: list[str],
    connect_config: ConnectConfig | None = None,
) -> ClusterConnection:
    """Connect to the cluster controller through the first reachable bootstrap server.

    Bootstrap servers are tried in order and the first one that answers is
    asked for the controller, which is then dialed directly. No attempt is
    retried: callers re-invoke the resolution instead.

    Args:
        bootstrap_servers: Ordered host:port addresses
        connect_config: Security and timeout settings

    Returns:
        ClusterConnection bound to the controller

    Raises:
        InvalidArgumentError: If no bootstrap server is given
        ConnectionUnavailableError: If no bootstrap server answers, the
            controller cannot be determined, or the controller does not answer
    """
    connect_config = connect_config or ConnectConfig()
    if not bootstrap_servers:
        raise InvalidArgumentError("bootstrap servers", "at least one address is required")

    bootstrap_metadata = None
    last_error: Exception | None = None

    for address in bootstrap_servers:
        try:
            _, bootstrap_metadata = dial(address, connect_config)
        except KafkaException as e:
            logger.warning(f"Error connecting to bootstrap server [{address}]: {e}")
            last_error = e
            continue
        logger.debug(f"Connected to bootstrap server [{address}]")
        break

    if bootstrap_metadata is None:
        raise ConnectionUnavailableError(
            f"Unable to connect to any of the specified bootstrap servers "
            f"[{', '.join(bootstrap_servers)}]: {last_error}",
            list(bootstrap_servers),
            last_error
        )

    controller = bootstrap_metadata.brokers.get(bootstrap_metadata.controller_id)
    if controller is None:
        raise ConnectionUnavailableError(
            f"Unable to ascertain the cluster controller "
            f"(controller id {bootstrap_metadata.controller_id})",
            list(bootstrap_servers)
        )

    controller_address = f"{controller.host}:{controller.port}"
    try:
        admin_client, _ = dial(controller_address, connect_config)
    except KafkaException as e:
        raise ConnectionUnavailableError(
            f"Unable to connect to the cluster controller [{controller_address}]: {e}",
            [controller_address],
            e
        ) from e

    logger.info(
        f"Connected to cluster controller [{controller_address}]",
        extra={"bootstrap_servers": ",".join(bootstrap_servers)}
    )
    return ClusterConnection(
        admin_client,
        controller.host,
        controller.port,
        bootstrap_servers,
        connect_config,
    )
