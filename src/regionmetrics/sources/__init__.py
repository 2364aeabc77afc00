"""Measurement sources pulled by the metrics aggregator."""

from .base import FileReadSource, RegionStoreSource, WalMetricsSource
from .store import FileReadMetrics, RegionStoreMetrics
from .wal import SampleWindow, WalMetrics

__all__ = [
    "FileReadSource",
    "RegionStoreSource",
    "WalMetricsSource",
    "FileReadMetrics",
    "RegionStoreMetrics",
    "SampleWindow",
    "WalMetrics",
]
