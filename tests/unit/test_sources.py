"""
Unit tests for the in-process measurement sources.
"""

from regionmetrics.metrics import SampleTriple
from regionmetrics.sources import FileReadMetrics, RegionStoreMetrics, SampleWindow, WalMetrics


class TestSampleWindow:
    """Test destructive count/min/max/total windows."""
    
    def test_empty_window(self):
        assert SampleWindow("w").get() == SampleTriple.empty()
    
    def test_get_summarizes_and_resets(self):
        window = SampleWindow("w")
        for value in [5, 1, 9, 5, 5]:
            window.inc(value)
        
        assert window.get() == SampleTriple(count=5, min=1, max=9, total=25)
        assert window.get().count == 0


class TestWalMetrics:
    """Test WAL sample source."""
    
    def test_record_write_feeds_latency_and_size(self):
        wal = WalMetrics()
        wal.record_write(3, 1000)
        wal.record_write(7, 500)
        
        assert wal.sample_write_latency() == SampleTriple(count=2, min=3, max=7, total=10)
        assert wal.sample_write_size() == SampleTriple(count=2, min=500, max=1000, total=1500)
        assert wal.sample_sync_latency().count == 0
    
    def test_sync_and_group_sync_are_separate(self):
        wal = WalMetrics()
        wal.record_sync(2)
        wal.record_group_sync(11)
        
        assert wal.sample_sync_latency() == SampleTriple(count=1, min=2, max=2, total=2)
        assert wal.sample_group_sync_latency() == SampleTriple(count=1, min=11, max=11, total=11)


class TestStoreSources:
    """Test file-read and region-store counters."""
    
    def test_file_reads_are_destructive(self):
        reads = FileReadMetrics()
        reads.record_read(4)
        reads.record_read(6)
        
        assert reads.read_ops() == 2
        assert reads.read_time() == 10
        assert reads.read_ops() == 0
        assert reads.read_time() == 0
    
    def test_region_store_writes(self):
        store = RegionStoreMetrics()
        store.record_write(memstore_insert_time=1, row_lock_time=2, concurrency_wait_time=3)
        store.record_write(memstore_insert_time=4, row_lock_time=5, concurrency_wait_time=6, num_ops=2)
        
        assert store.write_ops() == 3
        assert store.memstore_insert_time() == 5
        assert store.row_lock_time() == 7
        assert store.concurrency_wait_time() == 9
        assert store.write_ops() == 0
