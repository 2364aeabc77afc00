"""Report sinks receiving the periodic metric record."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .models import DistributionSnapshot, MetricRecord, MetricValue

logger = logging.getLogger(__name__)


class ReportSink(ABC):
    """Consumer of a pushed metric record.
    
    A record is built with any number of ``set_tag``/``set_metric`` calls and
    is complete once ``update`` is called.
    """
    
    @abstractmethod
    def set_tag(self, name: str, value: str) -> None:
        """Attach a tag to the record being built."""
        pass
    
    @abstractmethod
    def set_metric(self, name: str, value: MetricValue) -> None:
        """Set a metric value on the record being built."""
        pass
    
    @abstractmethod
    def update(self) -> None:
        """Signal that the current record is complete."""
        pass


class RecordingSink(ReportSink):
    """Keeps every completed record in memory."""
    
    def __init__(self, record_name: str = "regionserver", max_records: Optional[int] = None):
        self.record_name = record_name
        self.max_records = max_records
        self.records: List[MetricRecord] = []
        self._tags: Dict[str, str] = {}
        self._pending: Dict[str, MetricValue] = {}
        self._sequence = 0
    
    def set_tag(self, name: str, value: str) -> None:
        self._tags[name] = value
    
    def set_metric(self, name: str, value: MetricValue) -> None:
        self._pending[name] = value
    
    def update(self) -> None:
        record = MetricRecord(
            record_name=self.record_name,
            sequence=self._sequence,
            tags=dict(self._tags),
            metrics=self._pending,
        )
        self.records.append(record)
        if self.max_records is not None and len(self.records) > self.max_records:
            del self.records[0]
        self._pending = {}
        self._sequence += 1
    
    @property
    def latest(self) -> Optional[MetricRecord]:
        return self.records[-1] if self.records else None
    
    def to_dataframe(self) -> pd.DataFrame:
        """Get all completed records as a pandas DataFrame, one row per tick."""
        if not self.records:
            return pd.DataFrame()
        return pd.DataFrame([record.flatten() for record in self.records])
    
    def save_csv(self, path: str) -> Path:
        csv_file = Path(path)
        csv_file.parent.mkdir(parents=True, exist_ok=True)
        self.to_dataframe().to_csv(csv_file, index=False)
        logger.info(f"Saved {len(self.records)} metric records to {csv_file}")
        return csv_file


class LoggingSink(ReportSink):
    """Logs each completed record as a single JSON line."""
    
    def __init__(self, record_name: str = "regionserver", level: int = logging.INFO):
        self.record_name = record_name
        self.level = level
        self._tags: Dict[str, str] = {}
        self._pending: Dict[str, MetricValue] = {}
    
    def set_tag(self, name: str, value: str) -> None:
        self._tags[name] = value
    
    def set_metric(self, name: str, value: MetricValue) -> None:
        self._pending[name] = value
    
    def update(self) -> None:
        payload = {
            name: value.to_dict() if isinstance(value, DistributionSnapshot) else value
            for name, value in self._pending.items()
        }
        logger.log(self.level, f"{self.record_name} {self._tags} {json.dumps(payload)}")
        self._pending = {}
