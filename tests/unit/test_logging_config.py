"""Tests for logging configuration."""
import json
import logging

import pytest

from kafkascope.logging_config import OperationTimer, StructuredFormatter, configure_logging


def make_record(**extra):
    record = logging.LogRecord("kafkascope.test", logging.INFO, __file__, 1, "Reading from topic", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:

    def test_text_with_context(self):
        line = StructuredFormatter().format(make_record(topic="orders", partition=0))

        assert " - INFO - kafkascope.test - Reading from topic" in line
        assert line.endswith("[topic=orders, partition=0]")

    def test_text_without_context(self):
        line = StructuredFormatter().format(make_record())

        assert line.endswith("Reading from topic")

    def test_json(self):
        data = json.loads(StructuredFormatter(json_format=True).format(make_record(topic="orders")))

        assert data["level"] == "INFO"
        assert data["message"] == "Reading from topic"
        assert data["context"] == {"topic": "orders"}


class TestConfigureLogging:

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        yield
        logging.basicConfig(handlers=[logging.NullHandler()], force=True)
        logging.getLogger("kafkascope").setLevel(logging.NOTSET)

    def test_logs_to_file(self, tmp_path):
        log_file = tmp_path / "kafkascope.log"

        configure_logging(level="WARNING", log_file=str(log_file))
        logging.getLogger("kafkascope.test").debug("Dialing broker", extra={"address": "broker-1:9092"})
        for handler in logging.getLogger().handlers:
            handler.flush()

        contents = log_file.read_text()
        assert "Dialing broker" in contents
        assert "address=broker-1:9092" in contents

    def test_stderr_on_request(self, capsys):
        configure_logging(level="INFO", console=True)
        logging.getLogger("kafkascope.test").info("Connected")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Connected" in captured.err

    def test_silent_without_handlers(self):
        configure_logging()

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.NullHandler)


class TestOperationTimer:

    def test_success(self, caplog):
        logger = logging.getLogger("kafkascope.test")

        with caplog.at_level(logging.DEBUG, logger="kafkascope.test"):
            with OperationTimer(logger, "topic creation", topic="orders") as timer:
                pass

        assert timer.duration >= 0
        completed = caplog.records[-1]
        assert completed.getMessage() == "Completed topic creation"
        assert completed.topic == "orders"
        assert hasattr(completed, "duration_seconds")

    def test_failure(self, caplog):
        logger = logging.getLogger("kafkascope.test")

        with caplog.at_level(logging.DEBUG, logger="kafkascope.test"):
            with pytest.raises(ValueError):
                with OperationTimer(logger, "topic deletion", topic="orders"):
                    raise ValueError("rejected")

        failed = caplog.records[-1]
        assert failed.levelno == logging.ERROR
        assert failed.getMessage() == "Failed topic deletion"
        assert failed.error == "rejected"
