"""Topic readers for kafkascope."""
from kafkascope.consumers.reader import BoundedReader
from kafkascope.consumers.strategies import (
    ExclusiveJoin,
    GroupJoin,
    OffsetBound,
    ReadStrategy,
    TimeBound,
    unique_group_id,
)

__all__ = [
    "BoundedReader",
    "ExclusiveJoin",
    "GroupJoin",
    "OffsetBound",
    "ReadStrategy",
    "TimeBound",
    "unique_group_id",
]
