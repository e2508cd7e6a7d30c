"""Base writer interface for producing records to a topic."""
from abc import ABC, abstractmethod
from typing import Optional


class RecordWriter(ABC):
    """Abstract base class for topic writers."""

    def __init__(self, topic: str, keyed: bool = False):
        """Initialize the writer.

        Args:
            topic: Topic to write to
            keyed: Whether records are partitioned by their key
        """
        self.topic = topic
        self.keyed = keyed

    @abstractmethod
    def write(
        self,
        key: bytes,
        value: bytes,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """Write one record and wait for it to be acknowledged.

        Args:
            key: Record key, ignored when the writer is not keyed
            value: Record value
            headers: Optional record headers

        Raises:
            WriteFailedError: If the record was not delivered
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Flush pending records and release the writer."""
        pass

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
