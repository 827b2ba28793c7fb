"""
Aggregation of discovery and probe results into per-server statuses.
"""

from .aggregator import StatusAggregator

__all__ = ["StatusAggregator"]
