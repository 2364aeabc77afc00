"""Typed configuration for the metrics subsystem."""

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


def parse_extended_period(raw: Any) -> int:
    """Parse the extended-period length in seconds.
    
    ``None``, an empty value or anything unparsable disables extended
    resets (returns 0). Never raises.
    """
    if raw is None or raw == "":
        return 0
    if isinstance(raw, bool):
        logger.warning(f"Ignoring boolean extended period {raw!r}; extended resets disabled")
        return 0
    try:
        return int(str(raw).strip())
    except ValueError:
        logger.warning(f"Couldn't parse extended period {raw!r}; extended resets disabled")
        return 0


class MetricsConfig(BaseModel):
    """Settings for one region-server metrics aggregator."""
    
    model_config = ConfigDict(extra="ignore")
    
    server_name: str = "RegionServer"
    record_name: str = "regionserver"
    tick_interval_s: float = Field(default=5.0, gt=0)
    extended_period_s: int = 0
    exporter_enabled: bool = False
    output_summary_json_path: Optional[str] = None
    output_records_csv_path: Optional[str] = None
    
    @field_validator("extended_period_s", mode="before")
    @classmethod
    def _lenient_extended_period(cls, value: Any) -> int:
        return parse_extended_period(value)
    
    @property
    def extended_period_millis(self) -> int:
        return self.extended_period_s * 1000


class SimulationConfig(BaseModel):
    """Settings for the tick scheduler."""
    
    model_config = ConfigDict(extra="ignore")
    
    max_simulation_time: float = Field(gt=0)
    random_seed: Optional[int] = None
    realtime: bool = False
    realtime_factor: float = Field(default=1.0, gt=0)
