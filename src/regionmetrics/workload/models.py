"""Data models for synthetic storage-node load."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class NodeWorkloadProfile:
    """Shape of the load a simulated region server sees."""
    
    request_inter_arrival_dist_config: Dict[str, Any]
    wal_write_latency_dist_config: Dict[str, Any]
    wal_write_size_dist_config: Dict[str, Any]
    wal_sync_latency_dist_config: Dict[str, Any]
    read_latency_dist_config: Dict[str, Any]
    memstore_insert_time_dist_config: Dict[str, Any]
    row_lock_time_dist_config: Dict[str, Any]
    concurrency_wait_time_dist_config: Dict[str, Any]
    flush_interval_dist_config: Dict[str, Any]
    flush_duration_dist_config: Dict[str, Any]
    compaction_interval_dist_config: Dict[str, Any]
    compaction_duration_dist_config: Dict[str, Any]
    write_probability: float = 0.5
    group_sync_probability: float = 0.1
    atomic_increment_probability: float = 0.0
    regions: int = 10
    stores_per_region: int = 1
    files_per_compaction: int = 3
    block_cache_capacity_bytes: int = 256 * 1024 * 1024
    block_cache_hit_probability: float = 0.8
    block_size_bytes: int = 64 * 1024
    gauge_refresh_interval_s: float = 1.0
