"""In-process counters for the file-read and region-store write paths.

Every reader returns the value accumulated since its previous call and
resets it to zero.
"""

import threading

from .base import FileReadSource, RegionStoreSource


class _ResettingCounter:
    
    def __init__(self):
        self._lock = threading.Lock()
        self._value = 0
    
    def add(self, amount: int) -> None:
        with self._lock:
            self._value += amount
    
    def get_and_reset(self) -> int:
        with self._lock:
            value = self._value
            self._value = 0
            return value


class FileReadMetrics(FileReadSource):
    """Store-file read op count and cumulative read time."""
    
    def __init__(self):
        self._ops = _ResettingCounter()
        self._time = _ResettingCounter()
    
    def record_read(self, time_ms: int) -> None:
        self._ops.add(1)
        self._time.add(time_ms)
    
    def read_ops(self) -> int:
        return self._ops.get_and_reset()
    
    def read_time(self) -> int:
        return self._time.get_and_reset()


class RegionStoreMetrics(RegionStoreSource):
    """Write op count with memstore insert, row lock and concurrency wait times."""
    
    def __init__(self):
        self._write_ops = _ResettingCounter()
        self._memstore_insert_time = _ResettingCounter()
        self._row_lock_time = _ResettingCounter()
        self._concurrency_wait_time = _ResettingCounter()
    
    def record_write(
        self,
        memstore_insert_time: int,
        row_lock_time: int,
        concurrency_wait_time: int,
        num_ops: int = 1,
    ) -> None:
        self._write_ops.add(num_ops)
        self._memstore_insert_time.add(memstore_insert_time)
        self._row_lock_time.add(row_lock_time)
        self._concurrency_wait_time.add(concurrency_wait_time)
    
    def write_ops(self) -> int:
        return self._write_ops.get_and_reset()
    
    def memstore_insert_time(self) -> int:
        return self._memstore_insert_time.get_and_reset()
    
    def row_lock_time(self) -> int:
        return self._row_lock_time.get_and_reset()
    
    def concurrency_wait_time(self) -> int:
        return self._concurrency_wait_time.get_and_reset()
