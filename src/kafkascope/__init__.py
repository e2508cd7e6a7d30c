# kafkascope - Inspect and exercise a Kafka cluster from the command line
__version__ = "0.1.0"

from kafkascope.config import AppConfig, ConnectConfig
from kafkascope.connection import ClusterConnection, resolve_connection
from kafkascope.console import Console
from kafkascope.consumers import BoundedReader, ExclusiveJoin, GroupJoin, OffsetBound, ReadStrategy, TimeBound
from kafkascope.producers import InteractiveProducer, TopicWriter
from kafkascope.session import ClusterSession
from kafkascope.topics import TopicManager

__all__ = [
    "__version__",
    "AppConfig",
    "BoundedReader",
    "ClusterConnection",
    "ClusterSession",
    "Console",
    "ConnectConfig",
    "ExclusiveJoin",
    "GroupJoin",
    "InteractiveProducer",
    "OffsetBound",
    "ReadStrategy",
    "TimeBound",
    "TopicManager",
    "TopicWriter",
    "resolve_connection",
]
