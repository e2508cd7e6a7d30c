"""Tests for kafkascope exceptions."""
import logging

from confluent_kafka import KafkaException
from confluent_kafka.error import KafkaError

from kafkascope.exceptions import (
    ConnectionUnavailableError,
    InvalidArgumentError,
    KafkaScopeError,
    PolicyViolationError,
    ReadTerminatedError,
    TopicAlreadyExistsError,
    TopicNotFoundError,
    TopicOperationError,
    WriteFailedError,
    is_policy_violation,
)


class TestKafkaScopeError:

    def test_logs_on_creation(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="kafkascope"):
            KafkaScopeError("Something failed", details="more", original_error=ValueError("cause"))

        messages = [record.getMessage() for record in caplog.records]
        assert "KafkaScopeError: Something failed" in messages
        assert "Details: more" in messages
        assert "Original error: cause" in messages

    def test_user_message_lists_suggestions(self):
        error = KafkaScopeError("Something failed", suggestions=["Try this", "Then that"])

        assert error.get_user_message() == "Something failed\n\nSuggestions:\n  1. Try this\n  2. Then that"


class TestSpecificErrors:

    def test_invalid_argument(self):
        error = InvalidArgumentError("delimiter", "must be one character")

        assert str(error) == "Invalid delimiter: must be one character"
        assert error.argument == "delimiter"

    def test_connection_unavailable(self):
        cause = KafkaException(KafkaError(-1, "Connection refused"))
        error = ConnectionUnavailableError("Unable to connect", ["a:9092", "b:9092"], cause)

        assert error.addresses == ["a:9092", "b:9092"]
        assert error.original_error is cause
        assert "a:9092, b:9092" in error.suggestions[0]

    def test_topic_errors(self):
        assert "already exists" in str(TopicAlreadyExistsError("orders"))
        assert "does not exist" in str(TopicNotFoundError("orders"))
        assert isinstance(TopicNotFoundError("orders"), KafkaScopeError)

    def test_topic_operation_error(self):
        error = TopicOperationError("orders", "create", ValueError("rejected"))

        assert str(error) == "Failed to create topic 'orders': rejected"
        assert error.operation == "create"
        assert error.topic == "orders"

    def test_policy_violation(self):
        error = PolicyViolationError("orders", "create", ValueError("Policy violation"))

        assert isinstance(error, TopicOperationError)
        assert "could not be created due to a policy violation" in str(error)
        assert "replication factor" in str(error)
        assert error.suggestions

    def test_read_terminated(self):
        error = ReadTerminatedError("orders", "partition 0, offsets 0 to 5", "Broker down")

        assert "orders" in str(error)
        assert "partition 0, offsets 0 to 5" in str(error)
        assert error.original_error is None

    def test_write_failed(self):
        cause = KafkaException(KafkaError(-1, "Broker down"))
        error = WriteFailedError("orders", cause)

        assert error.topic == "orders"
        assert error.original_error is cause


class TestIsPolicyViolation:

    def test_matches_error_code_name(self):
        assert is_policy_violation("KafkaError{code=POLICY_VIOLATION,val=44}")

    def test_matches_broker_message(self):
        assert is_policy_violation(ValueError("Policy Violation: replication factor"))

    def test_other_errors(self):
        assert not is_policy_violation("Broker: Invalid replication factor")
