"""Management exporter republishing live aggregator values to Prometheus."""

import logging
from typing import TYPE_CHECKING, Iterator, Optional

from prometheus_client import CollectorRegistry
from prometheus_client.core import GaugeMetricFamily, Metric

from .models import DistributionSnapshot

if TYPE_CHECKING:
    from .aggregator import RegionServerMetrics

logger = logging.getLogger(__name__)

METRIC_PREFIX = "regionserver"


class RegionServerStatistics:
    """Custom Prometheus collector over a ``RegionServerMetrics`` instance.
    
    Collection only reads the aggregator; it never rolls intervals or
    resets anything.
    """
    
    def __init__(self, metrics: "RegionServerMetrics", server_name: str):
        self.metrics = metrics
        self.server_name = server_name
        self._registry: Optional[CollectorRegistry] = None
    
    def attach(self, registry: CollectorRegistry) -> None:
        registry.register(self)
        self._registry = registry
        logger.info(f"Registered management exporter for {self.server_name}")
    
    @property
    def attached(self) -> bool:
        return self._registry is not None
    
    def describe(self) -> Iterator[Metric]:
        # Names are dynamic; registration must not trigger a collect.
        return iter(())
    
    def collect(self) -> Iterator[Metric]:
        for name, value in self.metrics.live_values().items():
            if isinstance(value, DistributionSnapshot):
                for field_name, part in value.to_dict().items():
                    yield self._gauge(f"{name}_{field_name}", part)
            else:
                yield self._gauge(name, value)
    
    def _gauge(self, name: str, value: float) -> GaugeMetricFamily:
        family = GaugeMetricFamily(
            f"{METRIC_PREFIX}_{name}",
            f"Region server metric {name}",
            labels=["server"],
        )
        family.add_metric([self.server_name], float(value))
        return family
    
    def shutdown(self) -> None:
        """Unregister from the registry; safe to call more than once."""
        if self._registry is None:
            return
        try:
            self._registry.unregister(self)
        except KeyError:
            logger.debug(f"Management exporter for {self.server_name} was not registered")
        self._registry = None
        logger.info(f"Unregistered management exporter for {self.server_name}")
