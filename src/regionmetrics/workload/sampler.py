"""Statistical distribution sampler for synthetic storage-node load."""

import logging
from typing import Any, Dict, Optional, Union

import numpy as np

logger = logging.getLogger(__name__)


class DistributionSampler:
    """Provides methods to sample values from various statistical distributions."""
    
    def __init__(self, seed: Optional[int] = None):
        """Initialize the sampler with optional random seed.
        
        Args:
            seed: Random seed for reproducibility
        """
        self.rng = np.random.default_rng(seed)
    
    def sample(self, distribution_config: Dict[str, Any]) -> Union[float, int]:
        """Sample a value from the specified distribution.
        
        Args:
            distribution_config: Configuration dict with 'type' and distribution parameters.
                Examples:
                - {'type': 'Exponential', 'rate': 5.0}
                - {'type': 'LogNormal', 'mean': 1.5, 'sigma': 0.5, 'is_int': True}
                - {'type': 'Uniform', 'low': 10, 'high': 100, 'is_int': True}
                
        Returns:
            Sampled value (float or int based on 'is_int' parameter)
        """
        dist_type = distribution_config.get("type", "Constant")
        is_int = distribution_config.get("is_int", False)
        
        if dist_type == "Constant":
            value = distribution_config.get("value", 1.0)
        
        elif dist_type == "Exponential":
            rate = distribution_config.get("rate", 1.0)
            value = self.rng.exponential(1.0 / rate)
        
        elif dist_type == "Uniform":
            low = distribution_config.get("low", 0.0)
            high = distribution_config.get("high", 1.0)
            value = self.rng.uniform(low, high)
        
        elif dist_type == "Normal":
            mean = distribution_config.get("mean", 0.0)
            std = distribution_config.get("std", distribution_config.get("sigma", 1.0))
            # Durations and sizes are never negative
            value = max(0.0, self.rng.normal(mean, std))
        
        elif dist_type == "LogNormal":
            # Parameters of the underlying normal distribution
            mean = distribution_config.get("mean", 0.0)
            sigma = distribution_config.get("sigma", 1.0)
            value = self.rng.lognormal(mean, sigma)
        
        else:
            logger.warning(f"Unknown distribution type: {dist_type}, using constant value 1.0")
            value = 1.0
        
        if is_int:
            value = max(0, int(round(value)))
        
        return value
