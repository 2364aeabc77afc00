"""Data models for metrics aggregation."""

from dataclasses import dataclass, field
from typing import Any, Dict, Union


@dataclass(frozen=True)
class SampleTriple:
    """Summary of everything a source observed since it was last read.

    ``count == 0`` means nothing was observed; min/max/total are then
    meaningless and are reported as zero.
    """
    
    count: int
    min: int
    max: int
    total: int
    
    @classmethod
    def empty(cls) -> "SampleTriple":
        return cls(count=0, min=0, max=0, total=0)


@dataclass(frozen=True)
class DistributionSnapshot:
    """Value pushed for one distribution on a tick."""
    
    num_ops: int
    avg_time: float
    min_time: float
    max_time: float
    
    def to_dict(self) -> Dict[str, float]:
        return {
            "num_ops": self.num_ops,
            "avg_time": self.avg_time,
            "min_time": self.min_time,
            "max_time": self.max_time,
        }


MetricValue = Union[int, float, DistributionSnapshot]


@dataclass
class MetricRecord:
    """One completed record delivered to a report sink."""
    
    record_name: str
    sequence: int
    tags: Dict[str, str] = field(default_factory=dict)
    metrics: Dict[str, MetricValue] = field(default_factory=dict)
    
    def flatten(self) -> Dict[str, Any]:
        """Flatten distribution snapshots into ``<name>_<field>`` columns."""
        row: Dict[str, Any] = {"record": self.record_name, "sequence": self.sequence}
        row.update(self.tags)
        for name, value in self.metrics.items():
            if isinstance(value, DistributionSnapshot):
                for key, part in value.to_dict().items():
                    row[f"{name}_{key}"] = part
            else:
                row[name] = value
        return row
