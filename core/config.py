"""
Configuration management for the Wormhole Privacy Score.
Handles loading, validation, and access to configuration parameters.
"""

import configparser
import os
import logging
from dataclasses import dataclass, field
from typing import List


logger = logging.getLogger(__name__)


# One whole token expressed in chain base units (12 decimals)
DEFAULT_UNIT = 10 ** 12

# Fees are expressed in basis points of the pre-fee input
BPS_DENOMINATOR = 10000


@dataclass
class PoolConfig:
    """Deposit pool bucket layout."""

    # Bucket 0 is [0, unit); doubling buckets start at unit
    unit: int = DEFAULT_UNIT
    num_buckets: int = 20  # Number of 16x-wide doubling buckets above the first

    def validate(self) -> None:
        """Validate pool configuration."""
        if self.unit < 1:
            raise ValueError(f"unit must be >= 1, got {self.unit}")
        if self.num_buckets < 0:
            raise ValueError(f"num_buckets must be >= 0, got {self.num_buckets}")

    def schema(self):
        """Return the shared bucket schema for this layout."""
        from pool.deposit_pool import BucketSchema
        return BucketSchema.standard(self.unit, self.num_buckets)


@dataclass
class ScoreConfig:
    """Privacy score parameters."""

    fee_bps: int = 10  # Volume fee in basis points (10 = 0.1%)
    k_min: int = 1  # Minimum subset size (typically ceil(num_outputs / 2))
    k_max: int = 16  # Maximum subset size (batch size)

    # Calibration settings
    target_bits: float = 40.0
    max_dist_fraction: float = 0.1  # Max fraction of the output to sacrifice

    # Sacrifice levels shown in a score table
    dist_fractions: List[float] = field(default_factory=lambda: [0.0, 0.001, 0.01, 0.05])

    def validate(self) -> None:
        """Validate score configuration."""
        if not 0 <= self.fee_bps < BPS_DENOMINATOR:
            raise ValueError(f"fee_bps must be in [0, {BPS_DENOMINATOR}), got {self.fee_bps}")

        if self.k_min < 1:
            raise ValueError(f"k_min must be >= 1, got {self.k_min}")

        if self.k_max < self.k_min:
            raise ValueError(f"k_max must be >= k_min ({self.k_min}), got {self.k_max}")

        if self.target_bits < 0:
            raise ValueError(f"target_bits must be >= 0, got {self.target_bits}")

        if not 0 <= self.max_dist_fraction <= 1:
            raise ValueError(f"max_dist_fraction must be in [0, 1], got {self.max_dist_fraction}")

        for fraction in self.dist_fractions:
            if not 0 <= fraction <= 1:
                raise ValueError(f"dist_fractions must be in [0, 1], got {fraction}")


@dataclass
class Config:
    """Main configuration container."""
    pool: PoolConfig = field(default_factory=PoolConfig)
    score: ScoreConfig = field(default_factory=ScoreConfig)

    def validate(self) -> None:
        """Validate entire configuration."""
        self.pool.validate()
        self.score.validate()
        logger.info("Configuration validated successfully")

    @classmethod
    def from_ini(cls, config_path: str) -> "Config":
        """Load configuration from INI file."""
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Config file not found: {config_path}")

        parser = configparser.ConfigParser()
        parser.read(config_path, encoding='utf-8')

        config = cls()

        # Load pool section
        if 'pool' in parser:
            sec = parser['pool']
            if 'unit' in sec:
                config.pool.unit = int(sec['unit'])
            if 'num_buckets' in sec:
                config.pool.num_buckets = int(sec['num_buckets'])

        # Load score section
        if 'score' in parser:
            sec = parser['score']
            if 'fee_bps' in sec:
                config.score.fee_bps = int(sec['fee_bps'])
            if 'k_min' in sec:
                config.score.k_min = int(sec['k_min'])
            if 'k_max' in sec:
                config.score.k_max = int(sec['k_max'])
            if 'target_bits' in sec:
                config.score.target_bits = float(sec['target_bits'])
            if 'max_dist_fraction' in sec:
                config.score.max_dist_fraction = float(sec['max_dist_fraction'])

            # Support both single value (0.01) and comma-separated list (0,0.001,0.01)
            if 'dist_fractions' in sec:
                fractions_str = sec['dist_fractions'].strip()
                config.score.dist_fractions = [
                    float(x.strip()) for x in fractions_str.split(',') if x.strip()
                ]

        logger.info(f"Configuration loaded from {config_path}")
        return config

    def to_ini(self, config_path: str) -> None:
        """Save configuration to INI file."""
        parser = configparser.ConfigParser()

        parser['pool'] = {
            'unit': str(self.pool.unit),
            'num_buckets': str(self.pool.num_buckets),
        }

        parser['score'] = {
            'fee_bps': str(self.score.fee_bps),
            'k_min': str(self.score.k_min),
            'k_max': str(self.score.k_max),
            'target_bits': str(self.score.target_bits),
            'max_dist_fraction': str(self.score.max_dist_fraction),
            'dist_fractions': ','.join(str(f) for f in self.score.dist_fractions),
        }

        with open(config_path, 'w', encoding='utf-8') as f:
            parser.write(f)

        logger.info(f"Configuration saved to {config_path}")
