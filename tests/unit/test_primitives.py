"""
Unit tests for gauges, rate counters and time-varying distributions.
"""

import pytest

from regionmetrics.metrics import (
    DistributionSnapshot,
    MetricsGauge,
    MetricsRate,
    PersistentTimeVaryingRate,
    TimeVaryingRate,
    ZeroOpsError,
)


def push(metric, sink):
    metric.push_metric(sink)
    sink.update()
    return sink.latest.metrics[metric.name]


class TestMetricsGauge:
    """Test settable gauges."""
    
    def test_set_and_get(self):
        gauge = MetricsGauge("regions")
        assert gauge.get() == 0
        gauge.set(42)
        assert gauge.get() == 42
    
    def test_inc_dec(self):
        gauge = MetricsGauge("stores")
        gauge.inc(5)
        gauge.dec(2)
        assert gauge.get() == 3
    
    def test_push_does_not_reset(self, sink):
        gauge = MetricsGauge("storefiles")
        gauge.set(7)
        assert push(gauge, sink) == 7
        assert push(gauge, sink) == 7


class TestMetricsRate:
    """Test per-interval event rates."""
    
    def test_rate_over_elapsed_seconds(self, clock, sink):
        rate = MetricsRate("requests", clock)
        rate.inc(10)
        clock.advance(2000)
        assert push(rate, sink) == 5.0
        assert rate.previous_interval_count == 10
    
    def test_sub_second_interval_counts_as_one_second(self, clock, sink):
        rate = MetricsRate("requests", clock)
        rate.inc(3)
        clock.advance(200)
        assert push(rate, sink) == 3.0
    
    def test_window_rolls_over(self, clock, sink):
        rate = MetricsRate("requests", clock)
        rate.inc(4)
        clock.advance(1000)
        push(rate, sink)
        clock.advance(1000)
        assert push(rate, sink) == 0.0
        assert rate.previous_interval_value == 0.0


class TestTimeVaryingRate:
    """Test the regular distribution accumulator."""
    
    def test_increment_tracks_totals_and_per_op_extremes(self):
        acc = TimeVaryingRate("fsWriteLatency")
        acc.increment(3, 15)
        assert acc.total_ops == 3
        assert acc.total_time == 15
        assert acc.min_time == 5.0
        assert acc.max_time == 5.0
        
        acc.record(1)
        acc.record(9)
        assert acc.min_time == 1
        assert acc.max_time == 9
    
    def test_push_rolls_interval_but_keeps_history(self, sink):
        acc = TimeVaryingRate("fsWriteLatency")
        acc.increment(3, 15)
        acc.record(1)
        
        assert push(acc, sink) == DistributionSnapshot(num_ops=4, avg_time=4.0, min_time=1, max_time=5.0)
        
        second = push(acc, sink)
        assert second.num_ops == 0
        assert second.avg_time == 0.0
        assert second.min_time == 1
        assert second.max_time == 5.0
        assert acc.total_ops == 4
        assert acc.total_time == 16
    
    def test_reset_min_max_only_clears_extremes(self):
        acc = TimeVaryingRate("fsSyncLatency")
        acc.record(2)
        acc.record(20)
        acc.reset_min_max()
        assert acc.min_time is None
        assert acc.max_time is None
        assert acc.total_ops == 2
        
        acc.record(7)
        assert acc.min_time == 7
        assert acc.max_time == 7
    
    @pytest.mark.parametrize("num_ops", [0, -1])
    def test_non_positive_ops_rejected_without_side_effects(self, num_ops):
        acc = TimeVaryingRate("fsReadLatency")
        acc.record(3)
        
        with pytest.raises(ZeroOpsError):
            acc.increment(num_ops, 100)
        
        assert acc.total_ops == 1
        assert acc.total_time == 3
        assert acc.min_time == 3
        assert acc.max_time == 3
    
    def test_zero_ops_error_is_a_division_error(self):
        with pytest.raises(ZeroDivisionError):
            TimeVaryingRate("rowLock").increment(0, 1)


class TestPersistentTimeVaryingRate:
    """Test the persistent distribution accumulator."""
    
    def test_history_survives_pushes(self, sink):
        acc = PersistentTimeVaryingRate("compactionTime")
        acc.record(10)
        acc.record(20)
        
        first = push(acc, sink)
        second = push(acc, sink)
        
        assert first == second
        assert second.num_ops == 2
        assert second.avg_time == 15.0
        assert second.min_time == 10
        assert second.max_time == 20
    
    def test_reset_min_max_avg_keeps_totals(self, sink):
        acc = PersistentTimeVaryingRate("flushSize")
        acc.record(100)
        acc.record(300)
        
        acc.reset_min_max_avg()
        
        assert acc.total_ops == 2
        assert acc.total_time == 400
        assert acc.average == 0.0
        assert acc.min_time is None
        
        acc.record(50)
        snapshot = push(acc, sink)
        assert snapshot.num_ops == 3
        assert snapshot.avg_time == 50.0
        assert snapshot.min_time == 50
        assert snapshot.max_time == 50
    
    def test_rejects_zero_ops_without_touching_average(self):
        acc = PersistentTimeVaryingRate("flushTime")
        acc.record(8)
        with pytest.raises(ZeroOpsError):
            acc.increment(0, 8)
        assert acc.average == 8.0
        assert acc.total_ops == 1
