"""Cross-table aggregation into master records."""

from .aggregator import (
    AggregationBatch,
    AggregationResult,
    CrossTableAggregator,
    normalize_parent_key,
)

__all__ = [
    "AggregationBatch",
    "AggregationResult",
    "CrossTableAggregator",
    "normalize_parent_key",
]
