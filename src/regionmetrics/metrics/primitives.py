"""Metric primitives: gauges, rate counters and time-varying distributions.

Every primitive guards its state with a reentrant lock. Callers that need
several primitives to change atomically (the aggregator) hand the same lock
to all of them.
"""

import threading
import time
from typing import Callable, Optional

from .models import DistributionSnapshot
from .sinks import ReportSink

Clock = Callable[[], float]


def system_clock_millis() -> float:
    """Wall clock in milliseconds."""
    return time.time() * 1000


class ZeroOpsError(ZeroDivisionError):
    """Raised when a distribution is incremented with a non-positive op count."""
    pass


class MetricsGauge:
    """A settable integer value, pushed unchanged on every tick."""
    
    def __init__(self, name: str, description: str = "", lock: Optional[threading.RLock] = None):
        self.name = name
        self.description = description
        self._lock = lock if lock is not None else threading.RLock()
        self._value = 0
    
    def set(self, value: int) -> None:
        with self._lock:
            self._value = value
    
    def inc(self, amount: int = 1) -> None:
        with self._lock:
            self._value += amount
    
    def dec(self, amount: int = 1) -> None:
        with self._lock:
            self._value -= amount
    
    def get(self) -> int:
        with self._lock:
            return self._value
    
    def push_metric(self, sink: ReportSink) -> None:
        sink.set_metric(self.name, self.get())


class MetricsRate:
    """Counts events and reports events per second over the previous interval."""
    
    def __init__(
        self,
        name: str,
        clock: Optional[Clock] = None,
        description: str = "",
        lock: Optional[threading.RLock] = None,
    ):
        self.name = name
        self.description = description
        self._clock = clock or system_clock_millis
        self._lock = lock if lock is not None else threading.RLock()
        self._value = 0
        self._prev_count = 0
        self._prev_rate = 0.0
        self._ts = self._clock()
    
    def inc(self, amount: int = 1) -> None:
        with self._lock:
            self._value += amount
    
    def _interval_heartbeat(self) -> None:
        now = self._clock()
        # Whole seconds, never less than one.
        diff = int((now - self._ts) // 1000)
        if diff <= 0:
            diff = 1
        self._prev_count = self._value
        self._prev_rate = self._value / diff
        self._value = 0
        self._ts = now
    
    def push_metric(self, sink: ReportSink) -> None:
        with self._lock:
            self._interval_heartbeat()
            sink.set_metric(self.name, self._prev_rate)
    
    @property
    def previous_interval_value(self) -> float:
        with self._lock:
            return self._prev_rate
    
    @property
    def previous_interval_count(self) -> int:
        with self._lock:
            return self._prev_count


class TimeVaryingRate:
    """Running count/time distribution with interval and historical views.
    
    ``increment(num_ops, time)`` adds ``num_ops`` operations that took
    ``time`` in total. The interval window rolls on every push; totals and
    the historical min/max survive pushes. Min/max track per-op values
    (``time / num_ops``) and are cleared only by ``reset_min_max``.
    """
    
    def __init__(self, name: str, description: str = "", lock: Optional[threading.RLock] = None):
        self.name = name
        self.description = description
        self._lock = lock if lock is not None else threading.RLock()
        self._interval_ops = 0
        self._interval_time = 0
        self._prev_ops = 0
        self._prev_avg = 0.0
        self._total_ops = 0
        self._total_time = 0
        self._min: Optional[float] = None
        self._max: Optional[float] = None
    
    def increment(self, num_ops: int, time: float) -> None:
        """Add ``num_ops`` operations with a combined duration (or size) of ``time``.
        
        Raises:
            ZeroOpsError: If ``num_ops`` is not positive. No state is changed.
        """
        if num_ops <= 0:
            raise ZeroOpsError(f"{self.name}: increment requires num_ops > 0, got {num_ops}")
        with self._lock:
            self._interval_ops += num_ops
            self._interval_time += time
            self._total_ops += num_ops
            self._total_time += time
            self._update_min_max(time / num_ops)
    
    def record(self, time: float) -> None:
        """Add a single operation."""
        self.increment(1, time)
    
    def _update_min_max(self, value: float) -> None:
        if self._min is None or value < self._min:
            self._min = value
        if self._max is None or value > self._max:
            self._max = value
    
    def _roll_interval(self) -> None:
        self._prev_ops = self._interval_ops
        if self._interval_ops:
            self._prev_avg = self._interval_time / self._interval_ops
        else:
            self._prev_avg = 0.0
        self._interval_ops = 0
        self._interval_time = 0
    
    def _snapshot(self) -> DistributionSnapshot:
        return DistributionSnapshot(
            num_ops=self._prev_ops,
            avg_time=self._prev_avg,
            min_time=self._min if self._min is not None else 0,
            max_time=self._max if self._max is not None else 0,
        )
    
    def push_metric(self, sink: ReportSink) -> None:
        with self._lock:
            self._roll_interval()
            sink.set_metric(self.name, self._snapshot())
    
    def snapshot(self) -> DistributionSnapshot:
        """Last pushed view, without rolling the interval."""
        with self._lock:
            return self._snapshot()
    
    def reset_min_max(self) -> None:
        with self._lock:
            self._min = None
            self._max = None
    
    @property
    def previous_interval_ops(self) -> int:
        with self._lock:
            return self._prev_ops
    
    @property
    def previous_interval_average(self) -> float:
        with self._lock:
            return self._prev_avg
    
    @property
    def total_ops(self) -> int:
        with self._lock:
            return self._total_ops
    
    @property
    def total_time(self) -> float:
        with self._lock:
            return self._total_time
    
    @property
    def min_time(self) -> Optional[float]:
        with self._lock:
            return self._min
    
    @property
    def max_time(self) -> Optional[float]:
        with self._lock:
            return self._max


class PersistentTimeVaryingRate(TimeVaryingRate):
    """Distribution whose min/max/avg outlive ordinary pushes.
    
    The pushed snapshot carries the absolute op count and the average since
    the last ``reset_min_max_avg``. Totals are never reset.
    """
    
    def __init__(self, name: str, description: str = "", lock: Optional[threading.RLock] = None):
        super().__init__(name, description, lock)
        self._avg_ops = 0
        self._avg_time = 0
    
    def increment(self, num_ops: int, time: float) -> None:
        with self._lock:
            super().increment(num_ops, time)
            self._avg_ops += num_ops
            self._avg_time += time
    
    def _snapshot(self) -> DistributionSnapshot:
        return DistributionSnapshot(
            num_ops=self._total_ops,
            avg_time=self._avg_time / self._avg_ops if self._avg_ops else 0.0,
            min_time=self._min if self._min is not None else 0,
            max_time=self._max if self._max is not None else 0,
        )
    
    def reset_min_max_avg(self) -> None:
        with self._lock:
            self.reset_min_max()
            self._avg_ops = 0
            self._avg_time = 0
    
    @property
    def average(self) -> float:
        with self._lock:
            return self._avg_time / self._avg_ops if self._avg_ops else 0.0
