"""Synthetic producers for a simulated region server."""

import logging
from typing import Any, Dict, List, Tuple

import simpy

from ..metrics import RegionServerMetrics
from ..sources import FileReadMetrics, RegionStoreMetrics, WalMetrics
from .models import NodeWorkloadProfile
from .sampler import DistributionSampler

logger = logging.getLogger(__name__)

MB = 1024 * 1024

# Shortest delay between two events of a producer process, in seconds
MIN_INTERVAL_S = 1e-3


class StorageWorkloadGenerator:
    """Drives requests, flushes and compactions against the metric sources.
    
    Client requests land in the WAL, region-store and file-read sources the
    aggregator pulls from; flushes and compactions go straight to the
    aggregator's producer API, and a housekeeping process refreshes the
    aggregator's gauges.
    """
    
    def __init__(
        self,
        simpy_env: simpy.Environment,
        config: Dict[str, Any],
        metrics: RegionServerMetrics,
        wal: WalMetrics,
        file_reads: FileReadMetrics,
        region_store: RegionStoreMetrics,
    ):
        """Initialize the workload generator.
        
        Args:
            simpy_env: SimPy environment instance
            config: Workload configuration containing:
                - total_duration: Duration of request generation in seconds
                - random_seed: Random seed for reproducibility
                - the NodeWorkloadProfile fields
            metrics: Aggregator receiving producer updates
            wal: Write-ahead log sample source
            file_reads: Store-file read counters
            region_store: Memstore write path counters
        """
        self.simpy_env = simpy_env
        self.config = config
        self.metrics = metrics
        self.wal = wal
        self.file_reads = file_reads
        self.region_store = region_store
        
        self.sampler = DistributionSampler(config.get("random_seed"))
        self.profile = self._parse_profile(config)
        
        num_regions = self.profile.regions
        self.memstore_bytes: List[int] = [0] * num_regions
        self.storefile_sizes: List[List[int]] = [[] for _ in range(num_regions)]
        self.compaction_queue: List[int] = []
        self.block_cache_blocks = 0
        self.block_cache_hits = 0
        self.block_cache_misses = 0
        
        self.request_counter = 0
        self.flush_counter = 0
        self.compaction_counter = 0
        
        logger.info(f"StorageWorkloadGenerator initialized with {num_regions} regions")
    
    @staticmethod
    def _parse_profile(config: Dict[str, Any]) -> NodeWorkloadProfile:
        known = NodeWorkloadProfile.__dataclass_fields__.keys()
        return NodeWorkloadProfile(**{k: v for k, v in config.items() if k in known})
    
    def start(self, schedule_process) -> None:
        """Schedule all producer processes with the given scheduling function."""
        schedule_process(self.generate_requests_process)
        schedule_process(self.flush_process)
        schedule_process(self.compaction_process)
        schedule_process(self.gauge_refresh_process)
    
    def _sample_int(self, dist_config: Dict[str, Any]) -> int:
        return max(0, int(round(self.sampler.sample(dist_config))))
    
    def _sample_interval(self, dist_config: Dict[str, Any]) -> float:
        """Sample a delay that always moves simulated time forward."""
        return max(MIN_INTERVAL_S, self.sampler.sample(dist_config))
    
    def generate_requests_process(self):
        """SimPy process issuing client requests until total_duration."""
        total_duration = self.config.get("total_duration", float("inf"))
        logger.info(f"Starting request generation (duration: {total_duration}s)")
        
        while self.simpy_env.now < total_duration:
            iat = self._sample_interval(self.profile.request_inter_arrival_dist_config)
            yield self.simpy_env.timeout(iat)
            self._handle_request()
        
        logger.info(f"Request generation completed. Generated {self.request_counter} requests")
    
    def _handle_request(self) -> None:
        self.request_counter += 1
        self.metrics.increment_requests(1)
        rng = self.sampler.rng
        if rng.random() < self.profile.write_probability:
            self._handle_write(int(rng.integers(len(self.memstore_bytes))))
        else:
            self._handle_read()
    
    def _handle_write(self, region: int) -> None:
        p = self.profile
        size = max(1, self._sample_int(p.wal_write_size_dist_config))
        self.wal.record_write(self._sample_int(p.wal_write_latency_dist_config), size)
        sync_latency = self._sample_int(p.wal_sync_latency_dist_config)
        if self.sampler.rng.random() < p.group_sync_probability:
            self.wal.record_group_sync(sync_latency)
        else:
            self.wal.record_sync(sync_latency)
        
        insert_time = self._sample_int(p.memstore_insert_time_dist_config)
        row_lock_time = self._sample_int(p.row_lock_time_dist_config)
        self.region_store.record_write(
            memstore_insert_time=insert_time,
            row_lock_time=row_lock_time,
            concurrency_wait_time=self._sample_int(p.concurrency_wait_time_dist_config),
        )
        if self.sampler.rng.random() < p.atomic_increment_probability:
            self.metrics.add_atomic_increment(insert_time + row_lock_time)
        self.memstore_bytes[region] += size
    
    def _handle_read(self) -> None:
        p = self.profile
        if self.block_cache_blocks and self.sampler.rng.random() < p.block_cache_hit_probability:
            self.block_cache_hits += 1
            return
        self.block_cache_misses += 1
        self.file_reads.record_read(self._sample_int(p.read_latency_dist_config))
        capacity_blocks = p.block_cache_capacity_bytes // p.block_size_bytes
        self.block_cache_blocks = min(capacity_blocks, self.block_cache_blocks + 1)
    
    def flush_process(self):
        """SimPy process flushing every non-empty memstore as one batch."""
        p = self.profile
        while True:
            yield self.simpy_env.timeout(self._sample_interval(p.flush_interval_dist_config))
            flushes: List[Tuple[int, int]] = []
            for region, size in enumerate(self.memstore_bytes):
                if size == 0:
                    continue
                flushes.append((self._sample_int(p.flush_duration_dist_config), size))
                self.memstore_bytes[region] = 0
                self.storefile_sizes[region].append(size)
                if (len(self.storefile_sizes[region]) >= p.files_per_compaction
                        and region not in self.compaction_queue):
                    self.compaction_queue.append(region)
            if flushes:
                self.metrics.add_flush(flushes)
                self.flush_counter += len(flushes)
                logger.debug(f"Flushed {len(flushes)} regions at time {self.simpy_env.now:.1f}")
    
    def compaction_process(self):
        """SimPy process compacting queued regions one at a time."""
        p = self.profile
        while True:
            yield self.simpy_env.timeout(self._sample_interval(p.compaction_interval_dist_config))
            if not self.compaction_queue:
                continue
            region = self.compaction_queue.pop(0)
            duration_ms = self._sample_int(p.compaction_duration_dist_config)
            yield self.simpy_env.timeout(duration_ms / 1000)
            size = sum(self.storefile_sizes[region])
            self.storefile_sizes[region] = [size]
            self.metrics.add_compaction(duration_ms, size)
            self.compaction_counter += 1
            logger.debug(f"Compacted region {region} ({size} bytes) in {duration_ms}ms")
    
    def gauge_refresh_process(self):
        """SimPy process publishing the node's current shape to the gauges."""
        while True:
            self.refresh_gauges()
            yield self.simpy_env.timeout(self.profile.gauge_refresh_interval_s)
    
    def refresh_gauges(self) -> None:
        p = self.profile
        m = self.metrics
        storefile_count = sum(len(files) for files in self.storefile_sizes)
        storefile_bytes = sum(sum(files) for files in self.storefile_sizes)
        cache_used = self.block_cache_blocks * p.block_size_bytes
        lookups = self.block_cache_hits + self.block_cache_misses
        
        m.regions.set(p.regions)
        m.stores.set(p.regions * p.stores_per_region)
        m.storefiles.set(storefile_count)
        # Index and bloom sizes approximated as fixed fractions of store file bytes
        m.storefile_index_size_mb.set(storefile_bytes // 1000 // MB)
        m.root_index_size_kb.set(storefile_count * 4)
        m.total_static_index_size_kb.set(storefile_bytes // 1000 // 1024)
        m.total_static_bloom_size_kb.set(storefile_bytes // 2000 // 1024)
        m.memstore_size_mb.set(sum(self.memstore_bytes) // MB)
        m.compaction_queue_size.set(len(self.compaction_queue))
        m.block_cache_size.set(cache_used)
        m.block_cache_free.set(p.block_cache_capacity_bytes - cache_used)
        m.block_cache_count.set(self.block_cache_blocks)
        m.block_cache_hit_ratio.set(int(100 * self.block_cache_hits / lookups) if lookups else 0)
