"""
Configuration validation for metrics experiments.

This module provides validation for:
- Metrics aggregator configuration
- Workload configuration
- Simulation (scheduler) configuration
- Complete experiment files
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..config import parse_extended_period

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""
    pass


SUPPORTED_DISTRIBUTIONS = {"Constant", "Exponential", "Uniform", "Normal", "LogNormal"}

DEFAULT_METRICS_CONFIG: Dict[str, Any] = {
    "server_name": "RegionServer",
    "record_name": "regionserver",
    "tick_interval_s": 5.0,
    "extended_period_s": 0,
    "exporter_enabled": False,
}

DEFAULT_WORKLOAD_CONFIG: Dict[str, Any] = {
    "total_duration": 60,
    "random_seed": 123,
    "request_inter_arrival_dist_config": {"type": "Exponential", "rate": 200.0},
    "wal_write_latency_dist_config": {"type": "LogNormal", "mean": 0.5, "sigma": 0.6},
    "wal_write_size_dist_config": {"type": "LogNormal", "mean": 7.0, "sigma": 1.0},
    "wal_sync_latency_dist_config": {"type": "LogNormal", "mean": 1.0, "sigma": 0.5},
    "read_latency_dist_config": {"type": "LogNormal", "mean": 1.5, "sigma": 0.7},
    "memstore_insert_time_dist_config": {"type": "Uniform", "low": 0, "high": 2},
    "row_lock_time_dist_config": {"type": "Exponential", "rate": 2.0},
    "concurrency_wait_time_dist_config": {"type": "Exponential", "rate": 4.0},
    "flush_interval_dist_config": {"type": "Constant", "value": 10.0},
    "flush_duration_dist_config": {"type": "Normal", "mean": 200, "std": 50},
    "compaction_interval_dist_config": {"type": "Exponential", "rate": 0.1},
    "compaction_duration_dist_config": {"type": "Normal", "mean": 1500, "std": 400},
}

INTERVAL_DIST_FIELDS = (
    "request_inter_arrival_dist_config",
    "flush_interval_dist_config",
    "compaction_interval_dist_config",
)


def can_sample_positive(dist: Dict[str, Any]) -> bool:
    """Whether a distribution config can produce a value above zero.

    Defaults mirror DistributionSampler.
    """
    dist_type = dist["type"]
    if dist_type == "Constant":
        return dist.get("value", 1.0) > 0
    if dist_type == "Uniform":
        return dist.get("high", 1.0) > 0
    if dist_type == "Exponential":
        return dist.get("rate", 1.0) > 0
    if dist_type == "Normal":
        return dist.get("mean", 0.0) > 0 or dist.get("std", dist.get("sigma", 1.0)) > 0
    return True


class MetricsConfigValidator:
    """Validates the metrics section."""

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> List[str]:
        errors = []

        tick_interval = config.get("tick_interval_s", 5.0)
        if not isinstance(tick_interval, (int, float)) or tick_interval <= 0:
            errors.append(f"Invalid metrics tick_interval_s: {tick_interval}")

        # An unparsable extended period disables extended resets; not an error
        raw_period = config.get("extended_period_s")
        if raw_period not in (None, "") and parse_extended_period(raw_period) == 0 and str(raw_period).strip() != "0":
            logger.warning(f"Extended period {raw_period!r} is unusable, extended resets will be disabled")

        for path_field in ("output_summary_json_path", "output_records_csv_path"):
            value = config.get(path_field)
            if value is not None and not isinstance(value, str):
                errors.append(f"Metrics {path_field} must be a string path")

        return errors


class WorkloadConfigValidator:
    """Validates the workload section."""

    @classmethod
    def validate(cls, workload: Dict[str, Any]) -> List[str]:
        errors = []

        if "total_duration" not in workload:
            errors.append("Workload missing total_duration")
        elif workload["total_duration"] <= 0:
            errors.append(f"Invalid workload total_duration: {workload['total_duration']}")

        for dist_field in DEFAULT_WORKLOAD_CONFIG:
            if not dist_field.endswith("_dist_config"):
                continue
            if dist_field not in workload:
                errors.append(f"Workload missing {dist_field}")
                continue
            dist = workload[dist_field]
            if not isinstance(dist, dict) or "type" not in dist:
                errors.append(f"Workload {dist_field} missing type")
            elif dist["type"] not in SUPPORTED_DISTRIBUTIONS:
                errors.append(f"Workload {dist_field} has unsupported type {dist['type']}")
            elif dist_field in INTERVAL_DIST_FIELDS and not can_sample_positive(dist):
                errors.append(f"Workload {dist_field} never produces a positive interval")

        for prob_field in ("write_probability", "group_sync_probability",
                           "atomic_increment_probability", "block_cache_hit_probability"):
            if prob_field in workload and not 0.0 <= workload[prob_field] <= 1.0:
                errors.append(f"Workload {prob_field} must be between 0 and 1")

        if workload.get("gauge_refresh_interval_s", 1.0) <= 0:
            errors.append(f"Invalid workload gauge_refresh_interval_s: {workload['gauge_refresh_interval_s']}")

        if workload.get("regions", 1) <= 0:
            errors.append(f"Invalid workload regions: {workload['regions']}")

        return errors


class ExperimentConfigValidator:
    """Validates complete experiment configuration."""

    @classmethod
    def apply_defaults(cls, config: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy with missing metrics/workload settings filled in."""
        fixed = copy.deepcopy(config) if config else {}

        metrics = fixed.setdefault("metrics", {})
        for key, value in DEFAULT_METRICS_CONFIG.items():
            if key not in metrics:
                metrics[key] = value

        workload = fixed.setdefault("workload", {})
        for key, value in DEFAULT_WORKLOAD_CONFIG.items():
            if key not in workload:
                logger.warning(f"Workload: Added missing {key} field")
                workload[key] = copy.deepcopy(value)

        return fixed

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """Validate complete experiment configuration."""
        all_errors = []

        if not isinstance(config, dict):
            return False, ["Configuration must be a mapping"]

        required_top = {"simulation", "metrics", "workload"}
        missing_top = required_top - set(config.keys())
        if missing_top:
            all_errors.append(f"Missing top-level fields: {missing_top}")
            return False, all_errors

        all_errors.extend(cls._validate_simulation(config["simulation"]))
        all_errors.extend(MetricsConfigValidator.validate(config["metrics"]))
        all_errors.extend(WorkloadConfigValidator.validate(config["workload"]))

        return len(all_errors) == 0, all_errors

    @classmethod
    def validate_or_raise(cls, config: Dict[str, Any]) -> None:
        is_valid, errors = cls.validate(config)
        if not is_valid:
            raise ConfigurationError("; ".join(errors))

    @classmethod
    def _validate_simulation(cls, simulation: Dict[str, Any]) -> List[str]:
        """Validate simulation configuration."""
        errors = []

        if "max_simulation_time" not in simulation:
            errors.append("Simulation missing max_simulation_time")
        elif simulation["max_simulation_time"] <= 0:
            errors.append(f"Invalid max_simulation_time: {simulation['max_simulation_time']}")

        if simulation.get("realtime_factor", 1.0) <= 0:
            errors.append(f"Invalid realtime_factor: {simulation['realtime_factor']}")

        return errors


def load_config_file(config_path: str) -> Dict[str, Any]:
    """Load a YAML or JSON experiment file based on its suffix."""
    config_file = Path(config_path)
    with open(config_file) as f:
        if config_file.suffix in [".yaml", ".yml"]:
            return yaml.safe_load(f)
        return json.load(f)


def validate_and_fix_config(config_path: str) -> Tuple[bool, List[str], Optional[Dict[str, Any]]]:
    """
    Load, validate, and fill defaults into a configuration file.

    Returns:
        (is_valid, errors, fixed_config)
    """
    config = load_config_file(config_path)
    if not isinstance(config, dict):
        return False, ["Configuration must be a mapping"], None

    fixed = ExperimentConfigValidator.apply_defaults(config)
    is_valid, errors = ExperimentConfigValidator.validate(fixed)

    if not is_valid:
        logger.warning(f"Configuration has {len(errors)} validation errors")
        for error in errors[:10]:  # Show first 10 errors
            logger.warning(f"  - {error}")
        if len(errors) > 10:
            logger.warning(f"  ... and {len(errors) - 10} more errors")

    return is_valid, errors, fixed
