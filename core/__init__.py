"""
Wormhole Privacy Score
======================
Anonymity-set estimation for wormhole deposits.

Provides:
- Configuration (pool bucket layout, score parameters)
- Standard normal CDF approximation
- Log-space binomial coefficients
"""

__version__ = "1.0.0"

from .config import Config, PoolConfig, ScoreConfig
from .gaussian import normal_cdf, normal_cdf_vector
from .combinatorics import log2_binomial

__all__ = [
    # Config
    "Config", "PoolConfig", "ScoreConfig",
    # Numerics
    "normal_cdf", "normal_cdf_vector", "log2_binomial",
]
