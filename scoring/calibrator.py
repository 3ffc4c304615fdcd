"""
Minimum sacrifice calibration.

Inverts the privacy score: finds the smallest dist that reaches a target
number of bits. Binary search relies on the score being non-decreasing in
dist, which holds while the selected bucket stays fixed.
"""

import math
import logging
from typing import Optional

from pool.deposit_pool import DepositPoolStats
from scoring.privacy_score import finite_amount, privacy_score


logger = logging.getLogger(__name__)


def find_min_dist(
    output_amount: float,
    pool: DepositPoolStats,
    fee_bps: int,
    k_min: int,
    k_max: int,
    target_bits: float,
    max_dist_fraction: float = 0.1
) -> Optional[int]:
    """
    Find the minimum dist (amount sacrifice) needed to achieve a target privacy score.

    Args:
        output_amount: The quantized output amount
        pool: Current deposit pool statistics
        fee_bps: Volume fee in basis points
        k_min: Minimum subset size
        k_max: Maximum subset size
        target_bits: Target privacy score in bits (e.g., 40)
        max_dist_fraction: Maximum fraction of output to sacrifice (default: 0.1 = 10%)

    Returns:
        The minimum dist value, or None if the target is unreachable
        within max_dist_fraction (also when output_amount or the dist cap
        has no finite float value)
    """
    amount = finite_amount(output_amount)
    cap = None if amount is None else finite_amount(amount * max_dist_fraction)
    if cap is None:
        logger.warning("Output amount or dist cap is not a finite number; no dist found")
        return None

    max_dist = math.floor(cap)

    def score(dist: int) -> float:
        return privacy_score(output_amount, dist, pool, fee_bps, k_min, k_max)

    if score(max_dist) < target_bits:
        logger.debug(f"Target {target_bits} bits unreachable within dist={max_dist}")
        return None

    if score(0) >= target_bits:
        return 0

    # lo is known insufficient, hi is known sufficient
    lo = 0
    hi = max_dist
    steps = 0
    while hi - lo > 1:
        mid = (lo + hi) // 2
        if score(mid) >= target_bits:
            hi = mid
        else:
            lo = mid
        steps += 1

    logger.debug(f"Found min dist {hi} for {target_bits} bits in {steps} steps")
    return hi
