"""Periodic aggregation of region-server metrics."""

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional, Tuple

import psutil
from prometheus_client import CollectorRegistry

from ..config import parse_extended_period
from ..core.tick_scheduler import Updater
from .exporter import RegionServerStatistics
from .models import MetricValue, SampleTriple
from .primitives import (
    Clock,
    MetricsGauge,
    MetricsRate,
    PersistentTimeVaryingRate,
    TimeVaryingRate,
    system_clock_millis,
)
from .sinks import ReportSink

if TYPE_CHECKING:
    from ..sources import FileReadSource, RegionStoreSource, WalMetricsSource

logger = logging.getLogger(__name__)

MB = 1024 * 1024

MemoryProbe = Callable[[], Tuple[int, int]]


def process_memory_usage() -> Tuple[int, int]:
    """Return (used, max) bytes: process RSS and total system memory."""
    used = psutil.Process().memory_info().rss
    total = psutil.virtual_memory().total
    return used, total


def fold_sample_triple(sample: SampleTriple, accumulator: TimeVaryingRate) -> None:
    """Merge a pre-aggregated sample into a distribution.

    The min and the max are fed as single operations and the remaining
    ``count - 2`` operations as one increment, so op count and total are
    preserved exactly. Historical min/max of the accumulator are therefore
    only as tight as the per-sample extremes: the middle increment
    contributes its average, never its own extremes.
    """
    if sample.count > 0:
        accumulator.increment(1, sample.min)
    if sample.count > 1:
        accumulator.increment(1, sample.max)
    if sample.count > 2:
        accumulator.increment(sample.count - 2, sample.total - sample.max - sample.min)


def _append_key_value(parts: List[str], key: str, value: Any) -> None:
    parts.append(f"{key}={value}")


class RegionServerMetrics(Updater):
    """Owns the region server's gauges, rates and distributions.

    A scheduler calls ``do_updates`` once per interval. Producers update
    metrics concurrently through the ``add_*``/``increment_*`` methods or the
    public gauges. Every mutation and every tick hold one coarse lock, so a
    tick sees either all or none of a producer call.
    """

    def __init__(
        self,
        sink: ReportSink,
        wal_source: Optional["WalMetricsSource"] = None,
        file_read_source: Optional["FileReadSource"] = None,
        region_source: Optional["RegionStoreSource"] = None,
        extended_period: Any = 0,
        server_name: str = "RegionServer",
        clock: Optional[Clock] = None,
        registry: Optional[CollectorRegistry] = None,
        memory_probe: Optional[MemoryProbe] = None,
    ):
        """Initialize the aggregator.

        Args:
            sink: Receiver of the pushed record
            wal_source: Write-ahead log sample source
            file_read_source: Store-file read counters
            region_source: Memstore write path counters
            extended_period: Extended period in seconds; 0, None or an
                unparsable value disables extended resets
            server_name: Tag identifying this server on every record
            clock: Millisecond clock, wall clock by default
            registry: Prometheus registry for the management exporter;
                no exporter is attached when None
            memory_probe: Callable returning (used, max) memory in bytes
        """
        self._lock = threading.RLock()
        self._sink = sink
        self._wal_source = wal_source
        self._file_read_source = file_read_source
        self._region_source = region_source
        self._clock = clock or system_clock_millis
        self._memory_probe = memory_probe or process_memory_usage
        self.server_name = server_name

        self.extended_period = parse_extended_period(extended_period) * 1000
        self.last_update = self._clock()
        self.last_ext_update = self.last_update

        lock = self._lock

        # Gauges, in push order
        self.stores = MetricsGauge("stores", "Count of stores open", lock)
        self.storefiles = MetricsGauge("storefiles", "Count of store files open", lock)
        self.storefile_index_size_mb = MetricsGauge(
            "storefileIndexSizeMB", "Sum of all store file index sizes in MB", lock
        )
        self.root_index_size_kb = MetricsGauge(
            "rootIndexSizeKB", "Total size of block index root levels in KB", lock
        )
        self.total_static_index_size_kb = MetricsGauge(
            "totalStaticIndexSizeKB", "Total size of all block indexes in KB", lock
        )
        self.total_static_bloom_size_kb = MetricsGauge(
            "totalStaticBloomSizeKB", "Total size of all Bloom filters in KB", lock
        )
        self.memstore_size_mb = MetricsGauge("memstoreSizeMB", "Sum of all memstore sizes in MB", lock)
        self.regions = MetricsGauge("regions", "Count of regions carried", lock)
        self.compaction_queue_size = MetricsGauge("compactionQueueSize", "Size of the compaction queue", lock)
        self.block_cache_size = MetricsGauge("blockCacheSize", "Block cache size", lock)
        self.block_cache_free = MetricsGauge("blockCacheFree", "Block cache free size", lock)
        self.block_cache_count = MetricsGauge("blockCacheCount", "Block cache item count", lock)
        self.block_cache_hit_ratio = MetricsGauge("blockCacheHitRatio", "Block cache hit ratio", lock)

        self._requests = MetricsRate("requests", self._clock, "Requests per second", lock)

        # Regular distributions
        self.fs_read_latency = TimeVaryingRate("fsReadLatency", "Store file read latency", lock)
        self.fs_write_latency = TimeVaryingRate("fsWriteLatency", "WAL append latency", lock)
        self.fs_write_size = TimeVaryingRate("fsWriteSize", "Bytes per WAL append", lock)
        self.fs_sync_latency = TimeVaryingRate("fsSyncLatency", "WAL sync latency", lock)
        self.fs_group_sync_latency = TimeVaryingRate("fsGroupSyncLatency", "WAL group sync latency", lock)
        self.memstore_insert_time = TimeVaryingRate("memstoreInsert", "Memstore insert time", lock)
        self.row_lock_time = TimeVaryingRate("rowLock", "Row lock wait time", lock)
        self.rwcc_wait_time = TimeVaryingRate("rwccWait", "Concurrency control wait time", lock)
        self.atomic_increment_time = TimeVaryingRate("atomicIncrementTime", "Atomic increment time", lock)

        # Persistent distributions
        self.compaction_time = PersistentTimeVaryingRate("compactionTime", "Time per compaction", lock)
        self.compaction_size = PersistentTimeVaryingRate("compactionSize", "Bytes per compaction", lock)
        self.flush_time = PersistentTimeVaryingRate("flushTime", "Time per flush", lock)
        self.flush_size = PersistentTimeVaryingRate("flushSize", "Bytes per flush", lock)

        self._gauges: List[MetricsGauge] = [
            self.stores,
            self.storefiles,
            self.storefile_index_size_mb,
            self.root_index_size_kb,
            self.total_static_index_size_kb,
            self.total_static_bloom_size_kb,
            self.memstore_size_mb,
            self.regions,
        ]
        self._late_gauges: List[MetricsGauge] = [
            self.compaction_queue_size,
            self.block_cache_size,
            self.block_cache_free,
            self.block_cache_count,
            self.block_cache_hit_ratio,
        ]
        self._distributions: List[TimeVaryingRate] = [
            self.fs_read_latency,
            self.fs_write_latency,
            self.fs_write_size,
            self.fs_sync_latency,
            self.fs_group_sync_latency,
            self.memstore_insert_time,
            self.row_lock_time,
            self.rwcc_wait_time,
            self.atomic_increment_time,
        ]
        self._persistent: List[PersistentTimeVaryingRate] = [
            self.compaction_time,
            self.compaction_size,
            self.flush_time,
            self.flush_size,
        ]

        self._sink.set_tag("RegionServer", server_name)

        self._statistics: Optional[RegionServerStatistics] = None
        if registry is not None:
            statistics = RegionServerStatistics(self, server_name)
            try:
                statistics.attach(registry)
                self._statistics = statistics
            except Exception as e:
                logger.error(f"Couldn't register management exporter, continuing without it: {e}")

        logger.info(
            f"RegionServerMetrics initialized for {server_name} "
            f"(extended period: {self.extended_period}ms)"
        )

    def shutdown(self) -> None:
        """Detach the management exporter, if any. Idempotent."""
        if self._statistics is not None:
            self._statistics.shutdown()
            self._statistics = None

    @property
    def exporter_attached(self) -> bool:
        return self._statistics is not None

    def do_updates(self) -> None:
        """Aggregate collaborator samples and push one record to the sink."""
        with self._lock:
            now = self._clock()
            elapsed = now - self.last_update
            self.last_update = now
            logger.debug(f"Metrics tick for {self.server_name}, {elapsed:.0f}ms since last tick")

            # has the extended period for long-living stats elapsed?
            if self.extended_period > 0 and self.last_update - self.last_ext_update >= self.extended_period:
                self.last_ext_update = self.last_update
                for persistent in self._persistent:
                    persistent.reset_min_max_avg()
                self.reset_all_min_max()
                logger.debug(f"Extended period elapsed for {self.server_name}, reset min/max")

            for gauge in self._gauges:
                gauge.push_metric(self._sink)
            self._requests.push_metric(self._sink)
            for gauge in self._late_gauges:
                gauge.push_metric(self._sink)

            self._pull_wal_metrics()
            self._pull_file_read_metrics()
            self._pull_region_store_metrics()

            for distribution in self._distributions:
                distribution.push_metric(self._sink)
            for persistent in self._persistent:
                persistent.push_metric(self._sink)

            self._sink.update()

    def _pull_wal_metrics(self) -> None:
        if self._wal_source is None:
            return
        source = self._wal_source
        pulls = [
            ("write latency", source.sample_write_latency, self.fs_write_latency),
            ("write size", source.sample_write_size, self.fs_write_size),
            ("sync latency", source.sample_sync_latency, self.fs_sync_latency),
            ("group sync latency", source.sample_group_sync_latency, self.fs_group_sync_latency),
        ]
        for label, sample_fn, accumulator in pulls:
            try:
                fold_sample_triple(sample_fn(), accumulator)
            except Exception as e:
                logger.error(f"Failed to pull WAL {label} sample, skipping this tick: {e}")

    def _pull_file_read_metrics(self) -> None:
        if self._file_read_source is None:
            return
        try:
            ops = self._file_read_source.read_ops()
            if ops != 0:
                self.fs_read_latency.increment(ops, self._file_read_source.read_time())
        except Exception as e:
            logger.error(f"Failed to pull file read metrics, skipping this tick: {e}")

    def _pull_region_store_metrics(self) -> None:
        if self._region_source is None:
            return
        source = self._region_source
        try:
            write_ops = source.write_ops()
        except Exception as e:
            logger.error(f"Failed to pull region write ops, skipping this tick: {e}")
            return
        if write_ops == 0:
            return
        timings = [
            ("memstore insert time", source.memstore_insert_time, self.memstore_insert_time),
            ("concurrency wait time", source.concurrency_wait_time, self.rwcc_wait_time),
            ("row lock time", source.row_lock_time, self.row_lock_time),
        ]
        for label, time_fn, accumulator in timings:
            try:
                accumulator.increment(write_ops, time_fn())
            except Exception as e:
                logger.error(f"Failed to pull region {label}, skipping this tick: {e}")

    def reset_all_min_max(self) -> None:
        """Clear historical min/max of every regular distribution."""
        with self._lock:
            for distribution in self._distributions:
                distribution.reset_min_max()

    @property
    def requests(self) -> float:
        """Requests per second over the previous interval."""
        return self._requests.previous_interval_value

    @property
    def requests_in_previous_interval(self) -> int:
        return self._requests.previous_interval_count

    def add_compaction(self, time: int, size: int) -> None:
        """
        Args:
            time: Time the compaction took
            size: Byte size of the store files in the compaction
        """
        with self._lock:
            self.compaction_time.record(time)
            self.compaction_size.record(size)

    def add_flush(self, flushes: Iterable[Tuple[int, int]]) -> None:
        """
        Args:
            flushes: History of (time, size) pairs, one increment each
        """
        with self._lock:
            for time, size in flushes:
                self.flush_time.record(time)
                self.flush_size.record(size)

    def add_atomic_increment(self, time: int) -> None:
        with self._lock:
            self.atomic_increment_time.record(time)

    def increment_requests(self, inc: int) -> None:
        with self._lock:
            self._requests.inc(inc)

    def live_values(self) -> Dict[str, MetricValue]:
        """Current values of every declared metric without changing any of them."""
        with self._lock:
            values: Dict[str, MetricValue] = {}
            for gauge in self._gauges:
                values[gauge.name] = gauge.get()
            values[self._requests.name] = self._requests.previous_interval_value
            for gauge in self._late_gauges:
                values[gauge.name] = gauge.get()
            for distribution in self._distributions + self._persistent:
                values[distribution.name] = distribution.snapshot()
            return values

    def report(self) -> str:
        """Human-readable summary of gauges and memory usage."""
        try:
            used, maximum = self._memory_probe()
        except psutil.Error as e:
            logger.warning(f"Couldn't read memory usage, reporting 0: {e}")
            used, maximum = 0, 0
        with self._lock:
            parts: List[str] = []
            _append_key_value(parts, "request", float(self._requests.previous_interval_value))
            _append_key_value(parts, "regions", self.regions.get())
            _append_key_value(parts, "stores", self.stores.get())
            _append_key_value(parts, "storefiles", self.storefiles.get())
            _append_key_value(parts, "storefileIndexSize", self.storefile_index_size_mb.get())
            _append_key_value(parts, "rootIndexSizeKB", self.root_index_size_kb.get())
            _append_key_value(parts, "totalStaticIndexSizeKB", self.total_static_index_size_kb.get())
            _append_key_value(parts, "totalStaticBloomSizeKB", self.total_static_bloom_size_kb.get())
            _append_key_value(parts, "memstoreSize", self.memstore_size_mb.get())
            _append_key_value(parts, "compactionQueueSize", self.compaction_queue_size.get())
            _append_key_value(parts, "usedHeap", used // MB)
            _append_key_value(parts, "maxHeap", maximum // MB)
            for gauge in (
                self.block_cache_size,
                self.block_cache_free,
                self.block_cache_count,
                self.block_cache_hit_ratio,
            ):
                _append_key_value(parts, gauge.name, gauge.get())
            return ", ".join(parts)

    def __str__(self) -> str:
        return self.report()
