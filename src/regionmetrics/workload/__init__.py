"""Synthetic storage-node workload module."""

from .models import NodeWorkloadProfile
from .sampler import DistributionSampler
from .workload_generator import StorageWorkloadGenerator

__all__ = ["NodeWorkloadProfile", "DistributionSampler", "StorageWorkloadGenerator"]
