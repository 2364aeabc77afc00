"""In-process write-ahead log measurement windows."""

import threading
from typing import Optional

from ..metrics.models import SampleTriple
from .base import WalMetricsSource


class SampleWindow:
    """Accumulates count/min/max/total until the next destructive ``get``."""
    
    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()
        self._count = 0
        self._min: Optional[int] = None
        self._max: Optional[int] = None
        self._total = 0
    
    def inc(self, value: int) -> None:
        with self._lock:
            self._count += 1
            self._total += value
            if self._min is None or value < self._min:
                self._min = value
            if self._max is None or value > self._max:
                self._max = value
    
    def get(self) -> SampleTriple:
        """Return the current window and start a new one."""
        with self._lock:
            if self._count == 0:
                return SampleTriple.empty()
            sample = SampleTriple(
                count=self._count,
                min=self._min,
                max=self._max,
                total=self._total,
            )
            self._count = 0
            self._min = None
            self._max = None
            self._total = 0
            return sample


class WalMetrics(WalMetricsSource):
    """Windows for append latency, append size, sync and group sync latency."""
    
    def __init__(self):
        self.write_latency = SampleWindow("writeLatency")
        self.write_size = SampleWindow("writeSize")
        self.sync_latency = SampleWindow("syncLatency")
        self.group_sync_latency = SampleWindow("groupSyncLatency")
    
    def record_write(self, latency_ms: int, size_bytes: int) -> None:
        self.write_latency.inc(latency_ms)
        self.write_size.inc(size_bytes)
    
    def record_sync(self, latency_ms: int) -> None:
        self.sync_latency.inc(latency_ms)
    
    def record_group_sync(self, latency_ms: int) -> None:
        self.group_sync_latency.inc(latency_ms)
    
    def sample_write_latency(self) -> SampleTriple:
        return self.write_latency.get()
    
    def sample_write_size(self) -> SampleTriple:
        return self.write_size.get()
    
    def sample_sync_latency(self) -> SampleTriple:
        return self.sync_latency.get()
    
    def sample_group_sync_latency(self) -> SampleTriple:
        return self.group_sync_latency.get()
