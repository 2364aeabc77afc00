"""Metrics aggregation and reporting module."""

from .aggregator import RegionServerMetrics, fold_sample_triple
from .exporter import RegionServerStatistics
from .models import DistributionSnapshot, MetricRecord, SampleTriple
from .primitives import (
    MetricsGauge,
    MetricsRate,
    PersistentTimeVaryingRate,
    TimeVaryingRate,
    ZeroOpsError,
)
from .sinks import LoggingSink, RecordingSink, ReportSink

__all__ = [
    "RegionServerMetrics",
    "fold_sample_triple",
    "RegionServerStatistics",
    "DistributionSnapshot",
    "MetricRecord",
    "SampleTriple",
    "MetricsGauge",
    "MetricsRate",
    "PersistentTimeVaryingRate",
    "TimeVaryingRate",
    "ZeroOpsError",
    "LoggingSink",
    "RecordingSink",
    "ReportSink",
]
