"""Interfaces of the subsystems the aggregator pulls measurements from."""

from abc import ABC, abstractmethod

from ..metrics.models import SampleTriple


class WalMetricsSource(ABC):
    """Write-ahead log measurements.
    
    Each sample method is a destructive read: it returns everything observed
    since the previous call and starts a new window.
    """
    
    @abstractmethod
    def sample_write_latency(self) -> SampleTriple:
        pass
    
    @abstractmethod
    def sample_write_size(self) -> SampleTriple:
        pass
    
    @abstractmethod
    def sample_sync_latency(self) -> SampleTriple:
        pass
    
    @abstractmethod
    def sample_group_sync_latency(self) -> SampleTriple:
        pass


class FileReadSource(ABC):
    """Store-file read measurements.
    
    ``read_ops`` and ``read_time`` are valid as a pair; the time is
    meaningless when the op count is zero.
    """
    
    @abstractmethod
    def read_ops(self) -> int:
        pass
    
    @abstractmethod
    def read_time(self) -> int:
        pass


class RegionStoreSource(ABC):
    """Write path measurements of the in-memory store."""
    
    @abstractmethod
    def write_ops(self) -> int:
        pass
    
    @abstractmethod
    def memstore_insert_time(self) -> int:
        pass
    
    @abstractmethod
    def row_lock_time(self) -> int:
        pass
    
    @abstractmethod
    def concurrency_wait_time(self) -> int:
        pass
