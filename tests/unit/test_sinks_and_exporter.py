"""
Unit tests for report sinks and the Prometheus exporter.
"""

import logging

from prometheus_client import CollectorRegistry

from regionmetrics.metrics import (
    DistributionSnapshot,
    LoggingSink,
    RecordingSink,
    RegionServerMetrics,
    RegionServerStatistics,
)


class TestRecordingSink:
    """Test in-memory record keeping."""
    
    def test_records_are_completed_on_update(self):
        sink = RecordingSink("regionserver")
        sink.set_tag("RegionServer", "rs1")
        sink.set_metric("regions", 3)
        assert sink.latest is None
        
        sink.update()
        sink.set_metric("regions", 4)
        sink.update()
        
        assert [r.sequence for r in sink.records] == [0, 1]
        assert sink.records[0].metrics == {"regions": 3}
        assert sink.records[1].tags == {"RegionServer": "rs1"}
    
    def test_max_records(self):
        sink = RecordingSink(max_records=2)
        for i in range(5):
            sink.set_metric("regions", i)
            sink.update()
        assert [r.metrics["regions"] for r in sink.records] == [3, 4]
    
    def test_dataframe_flattens_distributions(self, tmp_path):
        sink = RecordingSink()
        sink.set_metric("regions", 2)
        sink.set_metric("flushTime", DistributionSnapshot(num_ops=3, avg_time=10.0, min_time=5, max_time=20))
        sink.update()
        
        df = sink.to_dataframe()
        assert df.loc[0, "regions"] == 2
        assert df.loc[0, "flushTime_num_ops"] == 3
        assert df.loc[0, "flushTime_max_time"] == 20
        
        csv_file = sink.save_csv(str(tmp_path / "out" / "records.csv"))
        assert csv_file.exists()
    
    def test_empty_dataframe(self):
        assert RecordingSink().to_dataframe().empty


class TestLoggingSink:
    
    def test_logs_record(self, caplog):
        sink = LoggingSink()
        sink.set_metric("fsSyncLatency", DistributionSnapshot(num_ops=1, avg_time=2.0, min_time=2, max_time=2))
        with caplog.at_level(logging.INFO):
            sink.update()
        assert "fsSyncLatency" in caplog.text


class TestRegionServerStatistics:
    """Test republishing live values."""
    
    def test_collect_exposes_distributions(self, sink, clock, memory_probe):
        metrics = RegionServerMetrics(sink, clock=clock, memory_probe=memory_probe)
        metrics.add_compaction(100, 2048)
        registry = CollectorRegistry()
        statistics = RegionServerStatistics(metrics, "rs1")
        statistics.attach(registry)
        
        labels = {"server": "rs1"}
        assert registry.get_sample_value("regionserver_compactionTime_num_ops", labels) == 1.0
        assert registry.get_sample_value("regionserver_compactionSize_max_time", labels) == 2048.0
        assert registry.get_sample_value("regionserver_requests", labels) == 0.0
    
    def test_collect_does_not_roll_intervals(self, sink, clock, memory_probe):
        metrics = RegionServerMetrics(sink, clock=clock, memory_probe=memory_probe)
        registry = CollectorRegistry()
        RegionServerStatistics(metrics, "rs1").attach(registry)
        metrics.increment_requests(7)
        
        list(registry.collect())
        list(registry.collect())
        metrics.do_updates()
        
        assert sink.latest.metrics["requests"] == 7.0
    
    def test_shutdown_is_idempotent(self, sink, clock, memory_probe):
        metrics = RegionServerMetrics(sink, clock=clock, memory_probe=memory_probe)
        registry = CollectorRegistry()
        statistics = RegionServerStatistics(metrics, "rs1")
        statistics.attach(registry)
        
        statistics.shutdown()
        statistics.shutdown()
        
        assert not statistics.attached
        assert list(registry.collect()) == []
