"""
Unit tests for configuration parsing and validation.
"""

import logging

import pytest
import yaml
from pydantic import ValidationError

from regionmetrics.config import MetricsConfig, parse_extended_period
from regionmetrics.utils.config_validator import (
    ConfigurationError,
    ExperimentConfigValidator,
    MetricsConfigValidator,
    WorkloadConfigValidator,
    validate_and_fix_config,
)


def minimal_config():
    return {
        "simulation": {"max_simulation_time": 30},
        "metrics": {"tick_interval_s": 5, "extended_period_s": 10},
        "workload": {"total_duration": 20},
    }


class TestExtendedPeriodParsing:
    """Test lenient parsing of the extended period."""
    
    @pytest.mark.parametrize("raw,expected", [
        (60, 60),
        ("60", 60),
        (" 15 ", 15),
        (0, 0),
        (None, 0),
        ("", 0),
    ])
    def test_valid_values(self, raw, expected):
        assert parse_extended_period(raw) == expected
    
    def test_unparsable_value_logged_and_disabled(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert parse_extended_period("one hour") == 0
        assert "extended resets disabled" in caplog.text
    
    def test_metrics_config_is_lenient(self):
        config = MetricsConfig(extended_period_s="bogus")
        assert config.extended_period_s == 0
        assert MetricsConfig(extended_period_s="30").extended_period_millis == 30000
    
    def test_metrics_config_rejects_bad_tick_interval(self):
        with pytest.raises(ValidationError):
            MetricsConfig(tick_interval_s=0)


class TestMetricsConfigValidator:
    """Test metrics section validation."""
    
    def test_valid(self):
        assert MetricsConfigValidator.validate({"tick_interval_s": 5}) == []
    
    def test_invalid_tick_interval(self):
        errors = MetricsConfigValidator.validate({"tick_interval_s": -1})
        assert any("tick_interval_s" in e for e in errors)
    
    def test_unparsable_period_is_not_an_error(self):
        assert MetricsConfigValidator.validate({"extended_period_s": "soon"}) == []


class TestWorkloadConfigValidator:
    """Test workload section validation."""
    
    def test_defaults_are_valid(self):
        config = ExperimentConfigValidator.apply_defaults(minimal_config())
        assert WorkloadConfigValidator.validate(config["workload"]) == []
    
    def test_unsupported_distribution(self):
        config = ExperimentConfigValidator.apply_defaults(minimal_config())
        config["workload"]["read_latency_dist_config"] = {"type": "Zipf"}
        errors = WorkloadConfigValidator.validate(config["workload"])
        assert any("unsupported type Zipf" in e for e in errors)
    
    def test_zero_constant_interval(self):
        config = ExperimentConfigValidator.apply_defaults(minimal_config())
        config["workload"]["flush_interval_dist_config"] = {"type": "Constant", "value": 0}
        errors = WorkloadConfigValidator.validate(config["workload"])
        assert any("flush_interval_dist_config" in e for e in errors)
    
    @pytest.mark.parametrize("dist", [
        {"type": "Uniform", "low": 0, "high": 0},
        {"type": "Uniform", "low": -5, "high": -1},
        {"type": "Exponential", "rate": 0},
        {"type": "Normal", "mean": 0, "std": 0},
    ])
    def test_interval_that_never_advances(self, dist):
        config = ExperimentConfigValidator.apply_defaults(minimal_config())
        config["workload"]["request_inter_arrival_dist_config"] = dist
        errors = WorkloadConfigValidator.validate(config["workload"])
        assert any("request_inter_arrival_dist_config never produces" in e for e in errors)
    
    def test_uniform_interval_from_zero_is_valid(self):
        config = ExperimentConfigValidator.apply_defaults(minimal_config())
        config["workload"]["request_inter_arrival_dist_config"] = {"type": "Uniform", "low": 0, "high": 0.1}
        assert WorkloadConfigValidator.validate(config["workload"]) == []
    
    def test_zero_gauge_refresh_interval(self):
        config = ExperimentConfigValidator.apply_defaults(minimal_config())
        config["workload"]["gauge_refresh_interval_s"] = 0
        errors = WorkloadConfigValidator.validate(config["workload"])
        assert any("gauge_refresh_interval_s" in e for e in errors)
    
    def test_probability_out_of_range(self):
        config = ExperimentConfigValidator.apply_defaults(minimal_config())
        config["workload"]["write_probability"] = 1.5
        errors = WorkloadConfigValidator.validate(config["workload"])
        assert any("write_probability" in e for e in errors)


class TestExperimentConfigValidator:
    """Test complete experiment validation."""
    
    def test_missing_top_level(self):
        is_valid, errors = ExperimentConfigValidator.validate({"simulation": {"max_simulation_time": 1}})
        assert not is_valid
        assert "Missing top-level fields" in errors[0]
    
    def test_apply_defaults_does_not_mutate_input(self):
        config = minimal_config()
        fixed = ExperimentConfigValidator.apply_defaults(config)
        assert "flush_interval_dist_config" in fixed["workload"]
        assert "flush_interval_dist_config" not in config["workload"]
        assert fixed["metrics"]["extended_period_s"] == 10
    
    def test_validate_or_raise(self):
        config = ExperimentConfigValidator.apply_defaults(minimal_config())
        config["simulation"]["max_simulation_time"] = 0
        with pytest.raises(ConfigurationError):
            ExperimentConfigValidator.validate_or_raise(config)
    
    def test_validate_and_fix_config_file(self, tmp_path):
        path = tmp_path / "experiment.yaml"
        path.write_text(yaml.dump(minimal_config()))
        
        is_valid, errors, config = validate_and_fix_config(str(path))
        
        assert is_valid, errors
        assert config["workload"]["total_duration"] == 20
        assert "compaction_interval_dist_config" in config["workload"]
