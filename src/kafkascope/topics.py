"""Topic lifecycle operations for Kafka."""
import logging
from concurrent.futures import TimeoutError as FuturesTimeoutError

from confluent_kafka import KafkaException
from confluent_kafka.admin import NewTopic
from confluent_kafka.error import KafkaError

from kafkascope.connection import ClusterConnection
from kafkascope.exceptions import (
    PolicyViolationError,
    TopicAlreadyExistsError,
    TopicNotFoundError,
    TopicOperationError,
    is_policy_violation,
)
from kafkascope.logging_config import OperationTimer
from kafkascope.models import TopicSummary
from kafkascope.topology import summarize_topics

logger = logging.getLogger(__name__)


class TopicManager:
    """Manages Kafka topic operations through the controller connection."""

    def __init__(self, connection: ClusterConnection):
        """Initialize TopicManager.

        Args:
            connection: Connection to the cluster controller
        """
        self.connection = connection

    def list_topics(self) -> dict[str, TopicSummary]:
        """List all topics with their partition count, replica count and leader.

        Raises:
            ConnectionUnavailableError: If unable to read cluster metadata
        """
        return summarize_topics(self.connection.read_partitions())

    def topic_exists(self, topic_name: str) -> bool:
        """Check if a topic exists.

        Args:
            topic_name: Name of the topic to check

        Returns:
            True if topic exists, False otherwise

        Raises:
            ConnectionUnavailableError: If unable to read cluster metadata
        """
        return topic_name in self.list_topics()

    def create_topic(
        self,
        topic_name: str,
        num_partitions: int = 1,
        replication_factor: int = 1,
    ) -> None:
        """Create a new topic.

        The existence check and the creation are separate requests, so a
        topic created concurrently by someone else is reported by the
        creation request itself.

        Args:
            topic_name: Name of the topic to create
            num_partitions: Number of partitions
            replication_factor: Replication factor

        Raises:
            TopicAlreadyExistsError: If the topic already exists
            PolicyViolationError: If a cluster policy rejected the request
            TopicOperationError: If topic creation fails for another reason
        """
        if self.topic_exists(topic_name):
            raise TopicAlreadyExistsError(topic_name)

        new_topic = NewTopic(
            topic_name,
            num_partitions=num_partitions,
            replication_factor=replication_factor,
        )

        timeout = self.connection.connect_config.timeout_seconds
        with OperationTimer(
            logger, "topic creation",
            topic=topic_name, partitions=num_partitions, replicas=replication_factor
        ):
            try:
                futures = self.connection.admin_client.create_topics(
                    [new_topic], request_timeout=timeout
                )
                futures[topic_name].result(timeout=timeout)
            except (KafkaException, FuturesTimeoutError) as e:
                error = e.args[0] if e.args else None
                if isinstance(error, KafkaError) and error.code() == KafkaError.TOPIC_ALREADY_EXISTS:
                    raise TopicAlreadyExistsError(topic_name, original_error=e) from e
                if is_policy_violation(e):
                    raise PolicyViolationError(topic_name, "create", e) from e
                raise TopicOperationError(topic_name, "create", e) from e

        logger.info(f"Topic '{topic_name}' created successfully")

    def delete_topic(self, topic_name: str) -> None:
        """Delete a topic.

        Args:
            topic_name: Name of the topic to delete

        Raises:
            TopicNotFoundError: If the topic does not exist
            PolicyViolationError: If a cluster policy rejected the request
            TopicOperationError: If topic deletion fails for another reason
        """
        if not self.topic_exists(topic_name):
            raise TopicNotFoundError(topic_name)

        logger.info(f"Deleting topic '{topic_name}'")

        timeout = self.connection.connect_config.timeout_seconds
        with OperationTimer(logger, "topic deletion", topic=topic_name):
            try:
                futures = self.connection.admin_client.delete_topics(
                    [topic_name], request_timeout=timeout
                )
                futures[topic_name].result(timeout=timeout)
            except (KafkaException, FuturesTimeoutError) as e:
                if is_policy_violation(e):
                    raise PolicyViolationError(topic_name, "delete", e) from e
                raise TopicOperationError(topic_name, "delete", e) from e

        logger.info(f"Topic '{topic_name}' deleted successfully")
