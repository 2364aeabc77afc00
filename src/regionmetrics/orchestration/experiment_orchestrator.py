"""Experiment orchestrator wiring a simulated region server to its metrics."""

import json
import logging
from pathlib import Path
from pprint import pformat
from typing import Any, Dict, Optional

import prometheus_client
import yaml

from ..config import MetricsConfig, SimulationConfig
from ..core import TickScheduler
from ..metrics import RecordingSink, RegionServerMetrics
from ..sources import FileReadMetrics, RegionStoreMetrics, WalMetrics
from ..utils.config_validator import ExperimentConfigValidator
from ..workload import StorageWorkloadGenerator

logger = logging.getLogger(__name__)


class ExperimentOrchestrator:
    """Main entry point to set up and run a metrics experiment."""

    def __init__(self, config_data: Dict[str, Any]):
        """Initialize the orchestrator with experiment configuration.

        Args:
            config_data: Complete experiment configuration dictionary
        """
        self.config = ExperimentConfigValidator.apply_defaults(config_data)
        ExperimentConfigValidator.validate_or_raise(self.config)

        self.metrics_config = MetricsConfig(**self.config["metrics"])
        self.simulation_config = SimulationConfig(**self.config["simulation"])

        # Component instances (initialized in setup)
        self.scheduler: Optional[TickScheduler] = None
        self.sink: Optional[RecordingSink] = None
        self.metrics: Optional[RegionServerMetrics] = None
        self.wal: Optional[WalMetrics] = None
        self.file_reads: Optional[FileReadMetrics] = None
        self.region_store: Optional[RegionStoreMetrics] = None
        self.workload_generator: Optional[StorageWorkloadGenerator] = None

        logger.info("ExperimentOrchestrator initialized")

    def setup(self) -> None:
        """Initialize all components."""
        logger.info("Setting up experiment components...")

        # 1. Tick scheduler
        self.scheduler = TickScheduler(self.simulation_config.model_dump())

        # 2. Measurement sources
        self.wal = WalMetrics()
        self.file_reads = FileReadMetrics()
        self.region_store = RegionStoreMetrics()

        # 3. Sink and aggregator
        self.sink = RecordingSink(self.metrics_config.record_name)
        registry = prometheus_client.REGISTRY if self.metrics_config.exporter_enabled else None
        self.metrics = RegionServerMetrics(
            self.sink,
            wal_source=self.wal,
            file_read_source=self.file_reads,
            region_source=self.region_store,
            extended_period=self.metrics_config.extended_period_s,
            server_name=self.metrics_config.server_name,
            clock=self.scheduler.now_millis,
            registry=registry,
        )
        self.scheduler.register_updater(self.metrics, self.metrics_config.tick_interval_s)

        # 4. Workload
        self.workload_generator = StorageWorkloadGenerator(
            self.scheduler.get_simpy_env(),
            self.config["workload"],
            self.metrics,
            self.wal,
            self.file_reads,
            self.region_store,
        )

        logger.info("Experiment setup complete")

    def run(self) -> Dict[str, Any]:
        """Run the complete experiment.

        Returns:
            Summary report dictionary
        """
        if self.scheduler is None:
            self.setup()

        logger.info("=" * 60)
        logger.info("STARTING METRICS EXPERIMENT")
        logger.info("=" * 60)
        logger.debug(f"Configuration: {pformat(self.config)}")

        try:
            self.workload_generator.start(self.scheduler.schedule_process)
            self.scheduler.run()
            summary = self.generate_summary()
            self._save_outputs(summary)
        finally:
            self.metrics.shutdown()

        logger.info(f"Final report: {self.metrics.report()}")
        logger.info("=" * 60)
        logger.info("METRICS EXPERIMENT COMPLETED")
        logger.info("=" * 60)

        return summary

    def generate_summary(self) -> Dict[str, Any]:
        latest = self.sink.latest
        return {
            "duration_s": self.scheduler.now(),
            "ticks": len(self.sink.records),
            "workload": {
                "requests": self.workload_generator.request_counter,
                "flushes": self.workload_generator.flush_counter,
                "compactions": self.workload_generator.compaction_counter,
            },
            "latest_record": latest.flatten() if latest is not None else {},
        }

    def _save_outputs(self, summary: Dict[str, Any]) -> None:
        summary_path = self.metrics_config.output_summary_json_path
        if summary_path:
            summary_file = Path(summary_path)
            summary_file.parent.mkdir(parents=True, exist_ok=True)
            with open(summary_file, "w") as f:
                json.dump(summary, f, indent=2, default=float)
            logger.info(f"Saved summary report to {summary_file}")

        csv_path = self.metrics_config.output_records_csv_path
        if csv_path:
            self.sink.save_csv(csv_path)

    @classmethod
    def from_yaml_file(cls, config_path: str) -> "ExperimentOrchestrator":
        """Create an orchestrator from a YAML configuration file."""
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f)

        return cls(config_data)

    @classmethod
    def from_json_file(cls, config_path: str) -> "ExperimentOrchestrator":
        """Create an orchestrator from a JSON configuration file."""
        with open(config_path, "r") as f:
            config_data = json.load(f)

        return cls(config_data)
