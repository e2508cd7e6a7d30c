"""Line driven production of records from an input stream."""
import logging
from collections.abc import Iterator
from typing import TextIO

from confluent_kafka import KafkaException

from kafkascope.console import Console
from kafkascope.exceptions import KafkaScopeError, WriteFailedError
from kafkascope.producers.base import RecordWriter

logger = logging.getLogger(__name__)

EXIT_SENTINEL = "x"
DEFAULT_KEY = "default"


def scan_tokens(stream: TextIO, delimiter: str = "\n", chunk_size: int = 4096) -> Iterator[str]:
    """Split a text stream into tokens on a single character delimiter.

    A trailing delimiter does not produce an empty last token. With the
    newline delimiter the stream is read line by line, so tokens are
    available as soon as a line is entered, and a carriage return before
    the newline is dropped.

    Args:
        stream: Text stream to read from
        delimiter: Single character separating tokens
        chunk_size: Characters read at a time for other delimiters
    """
    if delimiter == "\n":
        for line in iter(stream.readline, ""):
            if line.endswith("\n"):
                line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
            yield line
        return

    buffer = ""
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        buffer += chunk
        *tokens, buffer = buffer.split(delimiter)
        yield from tokens

    if buffer:
        yield buffer


class InteractiveProducer:
    """Writes values, and optionally keys, read from an input stream to a topic.

    Attended, the operator is prompted for each value (and key) and ``X``
    ends the session. Unattended, values and keys alternate as delimited
    tokens until the input is exhausted.
    """

    def __init__(self, input_stream: TextIO, console: Console):
        self.input_stream = input_stream
        self.console = console

    def run(self, writer: RecordWriter, keyed: bool = False) -> int:
        """Drive the writer from the input stream until it ends.

        The writer is closed however the loop ends. A write failure ends the
        loop and is reported, it is not raised.

        Args:
            writer: Writer for the target topic
            keyed: Whether each value is followed by a key

        Returns:
            Number of records written
        """
        unattended = self.console.unattended
        # an operator types lines; the delimiter only frames piped input
        tokens = scan_tokens(self.input_stream, self.console.delimiter if unattended else "\n")
        key, written = "", 0

        self.console.write_prompt(writer.topic)

        try:
            for value in tokens:
                if not unattended and value.lower() == EXIT_SENTINEL:
                    break

                if keyed:
                    if not unattended:
                        self.console.key_prompt(first=not key)
                        if not key:
                            key = DEFAULT_KEY

                    entered = next(tokens, None)
                    if entered is None:
                        break
                    if entered:
                        key = entered

                try:
                    writer.write(key.encode("utf-8"), value.encode("utf-8"))
                except WriteFailedError as e:
                    self.console.failed("error writing to topic")
                    logger.error(
                        f"Error writing [{value} > {writer.topic}]: {e}",
                        extra={"topic": writer.topic, "key": key}
                    )
                    break

                written += 1
                self.console.written(value, writer.topic)
        finally:
            try:
                writer.close()
            except (KafkaScopeError, KafkaException) as e:
                logger.error(f"Error closing writer: {e}", extra={"topic": writer.topic})

        logger.info(f"Wrote {written} records to topic '{writer.topic}'")
        return written
