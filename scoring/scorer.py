"""
Config-bound privacy scorer.

Binds a deposit pool to validated score parameters so a wallet or explorer
can request scores, tables and calibrations by output amount alone.
"""

import logging
from typing import List, Optional

from core.config import ScoreConfig
from pool.deposit_pool import DepositPoolStats
from scoring.calibrator import find_min_dist
from scoring.labeler import PrivacyScoreResult, privacy_score_table
from scoring.privacy_score import privacy_score


logger = logging.getLogger(__name__)


class PrivacyScorer:
    """
    Scores wormhole outputs against a live deposit pool.

    The pool is referenced, not copied: scores reflect the pool's
    statistics at call time.
    """

    def __init__(self, pool: DepositPoolStats, config: Optional[ScoreConfig] = None):
        """
        Initialize the scorer.

        Args:
            pool: Deposit pool maintained by the indexer
            config: Score parameters. Uses defaults if None.

        Raises:
            ValueError: If the configuration is invalid
        """
        self.pool = pool
        self.config = config or ScoreConfig()
        self.config.validate()

        logger.info(
            f"PrivacyScorer initialized: fee={self.config.fee_bps} bps, "
            f"k in [{self.config.k_min}, {self.config.k_max}]"
        )

    def score(self, output_amount: float, dist: float = 0) -> float:
        """Privacy score in bits for an output at the given sacrifice."""
        cfg = self.config
        return privacy_score(output_amount, dist, self.pool, cfg.fee_bps, cfg.k_min, cfg.k_max)

    def table(self, output_amount: float) -> List[PrivacyScoreResult]:
        """Score table over the configured dist fractions."""
        cfg = self.config
        return privacy_score_table(
            output_amount, self.pool, cfg.fee_bps, cfg.k_min, cfg.k_max,
            dist_fractions=cfg.dist_fractions
        )

    def min_dist(self, output_amount: float, target_bits: Optional[float] = None) -> Optional[int]:
        """
        Smallest sacrifice reaching target_bits (configured target if None).

        Returns:
            The dist, or None if unreachable within the configured max_dist_fraction
        """
        cfg = self.config
        if target_bits is None:
            target_bits = cfg.target_bits
        return find_min_dist(
            output_amount, self.pool, cfg.fee_bps, cfg.k_min, cfg.k_max,
            target_bits, max_dist_fraction=cfg.max_dist_fraction
        )
