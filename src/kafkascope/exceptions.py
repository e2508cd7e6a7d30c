"""Custom exceptions for kafkascope cluster operations.

Every failure reported by the Kafka client is wrapped in one of these
exceptions together with the context of the operation that was attempted
(topic, partition, bounds), so that the log alone is enough to reproduce it.
"""

import logging
from typing import Optional


class KafkaScopeError(Exception):
    """Base exception for all kafkascope errors.

    Provides common functionality for error reporting and logging.
    """

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        suggestions: Optional[list[str]] = None,
        original_error: Optional[Exception] = None
    ):
        """Initialize kafkascope exception.

        Args:
            message: Main error message
            details: Additional technical details
            suggestions: List of suggested solutions
            original_error: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.details = details
        self.suggestions = suggestions or []
        self.original_error = original_error

        self._log_error()

    def _log_error(self) -> None:
        """Log the error with appropriate level."""
        logger = logging.getLogger(self.__class__.__module__)
        logger.error(f"{self.__class__.__name__}: {self.message}")
        if self.details:
            logger.debug(f"Details: {self.details}")
        if self.original_error:
            logger.debug(f"Original error: {self.original_error}")

    def get_user_message(self) -> str:
        """Get user-friendly error message with suggestions."""
        msg = self.message
        if self.suggestions:
            msg += "\n\nSuggestions:"
            for i, suggestion in enumerate(self.suggestions, 1):
                msg += f"\n  {i}. {suggestion}"
        return msg


class InvalidArgumentError(KafkaScopeError):
    """Raised when an operation is given an argument it cannot work with."""

    def __init__(self, argument: str, reason: str):
        super().__init__(message=f"Invalid {argument}: {reason}")
        self.argument = argument
        self.reason = reason


# Connection exceptions

class ConnectionUnavailableError(KafkaScopeError):
    """Raised when no bootstrap server or the cluster controller is reachable."""

    def __init__(
        self,
        message: str,
        addresses: list[str],
        connection_error: Optional[Exception] = None
    ):
        suggestions = [
            f"Verify Kafka is running at: {', '.join(addresses)}",
            "Check network connectivity to the brokers and their advertised listeners",
            "Verify TLS and SASL settings (--tls, --scram, --auth-key)",
        ]

        super().__init__(
            message=message,
            details=f"Connection error: {connection_error}" if connection_error else None,
            suggestions=suggestions,
            original_error=connection_error
        )
        self.addresses = addresses


# Topic lifecycle exceptions

class TopicException(KafkaScopeError):
    """Base exception for topic lifecycle errors."""

    def __init__(self, topic: str, message: str, **kwargs):
        super().__init__(message=message, **kwargs)
        self.topic = topic


class TopicAlreadyExistsError(TopicException):
    """Raised when creating a topic that is already listed by the cluster."""

    def __init__(self, topic: str, original_error: Optional[Exception] = None):
        super().__init__(
            topic,
            f"Cannot create topic '{topic}': topic already exists",
            original_error=original_error
        )


class TopicNotFoundError(TopicException):
    """Raised when deleting a topic that the cluster does not list."""

    def __init__(self, topic: str):
        super().__init__(topic, f"Cannot delete topic '{topic}': topic does not exist")


class TopicOperationError(TopicException):
    """Raised when the cluster rejects a topic create or delete request."""

    def __init__(self, topic: str, operation: str, operation_error: Exception, **kwargs):
        kwargs.setdefault("message", f"Failed to {operation} topic '{topic}': {operation_error}")
        super().__init__(
            topic,
            details=f"{operation.capitalize()} error: {operation_error}",
            original_error=operation_error,
            **kwargs
        )
        self.operation = operation


class PolicyViolationError(TopicOperationError):
    """Raised when a topic request is rejected by a cluster policy."""

    def __init__(self, topic: str, operation: str, operation_error: Exception):
        suggestions = [
            "Check the replication factor: development images often require 1, "
            "production clusters often require at least 3",
            "Check partition and topic quotas configured on the cluster",
        ]

        super().__init__(
            topic,
            operation,
            operation_error,
            message=(
                f"Topic '{topic}' could not be {operation}d due to a policy violation. "
                f"This may be due to an invalid replication factor: {operation_error}"
            ),
            suggestions=suggestions
        )


# Consumption and production exceptions

class ReadTerminatedError(KafkaScopeError):
    """Raised when a read sequence ends because of a client or broker error."""

    def __init__(self, topic: str, context: str, read_error: Exception | str):
        super().__init__(
            message=f"Reading from topic '{topic}' ({context}) terminated: {read_error}",
            original_error=read_error if isinstance(read_error, Exception) else None
        )
        self.topic = topic
        self.context = context


class WriteFailedError(KafkaScopeError):
    """Raised when a record could not be delivered to a topic."""

    def __init__(self, topic: str, write_error: Exception | str):
        suggestions = [
            f"Verify topic '{topic}' exists and is accessible",
            "Verify producer permissions for the topic",
            "Check Kafka broker health and capacity",
        ]

        super().__init__(
            message=f"Failed to write to topic '{topic}': {write_error}",
            suggestions=suggestions,
            original_error=write_error if isinstance(write_error, Exception) else None
        )
        self.topic = topic


def is_policy_violation(error: Exception | str) -> bool:
    """Whether an error's text reports a cluster policy rejection.

    librdkafka renders the error code as ``POLICY_VIOLATION`` next to the
    broker's message, so underscores are read as spaces.
    """
    return "policy violation" in str(error).lower().replace("_", " ")
