"""Topic writers for kafkascope."""
from kafkascope.producers.base import RecordWriter
from kafkascope.producers.interactive import InteractiveProducer, scan_tokens
from kafkascope.producers.topic_writer import TopicWriter

__all__ = ["RecordWriter", "InteractiveProducer", "TopicWriter", "scan_tokens"]
