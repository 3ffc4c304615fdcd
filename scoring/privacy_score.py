"""
Wormhole Privacy Score.

Estimates the anonymity set size for a wormhole output based on the current
deposit pool statistics. The score is log2 of the estimated number of
deposit subsets that could have produced the observed output.

Algorithm:
    1. Compute the pre-fee input range [input_lo, input_hi] from the output
       amount and dist
    2. Select the pool bucket that best fits input_lo
    3. For each subset size k in [k_min, k_max]:
       - Use the CLT to estimate P(sum of k bucket deposits falls in the
         input range)
       - Multiply by C(count, k) to get the estimated valid subsets of size k
    4. Sum across all k in log2 space (log-sum-exp) and floor at 0
"""

import math
import logging
from typing import Optional

import numpy as np

from core.combinatorics import log2_binomial
from core.config import BPS_DENOMINATOR
from core.gaussian import normal_cdf_vector
from pool.deposit_pool import DepositPoolStats
from scoring.bucket_selector import select_bucket


logger = logging.getLogger(__name__)


def finite_amount(value) -> Optional[float]:
    """Convert an amount to a finite float, or None when it has no such value."""
    try:
        converted = float(value)
    except (OverflowError, TypeError, ValueError):
        return None
    if not math.isfinite(converted):
        return None
    return converted


def privacy_score(
    output_amount: float,
    dist: float,
    pool: DepositPoolStats,
    fee_bps: int,
    k_min: int,
    k_max: int
) -> float:
    """
    Compute the privacy score for a wormhole output.

    Degenerate inputs (empty pool, identical deposits, k_min above the
    usable subset size, an invalid fee, amounts with no finite float value)
    score 0 rather than raising.

    Args:
        output_amount: The quantized output amount observed on-chain
        dist: Amount reduction (sacrifice) for privacy. The actual input could
            be anywhere in [output_amount, output_amount + dist] before fees.
        pool: Current deposit pool statistics
        fee_bps: Volume fee in basis points (e.g., 10 = 0.1%)
        k_min: Minimum subset size (typically ceil(num_outputs / 2))
        k_max: Maximum subset size (batch size, e.g., 16)

    Returns:
        Privacy score in bits (log2 of estimated anonymity set size)
    """
    if fee_bps >= BPS_DENOMINATOR:
        logger.warning(f"fee_bps={fee_bps} leaves no output; scoring as 0 bits")
        return 0.0

    amount = finite_amount(output_amount)
    spread = finite_amount(dist)
    if amount is None or spread is None:
        logger.warning("Output amount or dist is not a finite number; scoring as 0 bits")
        return 0.0

    # Pre-fee input range: output / (1 - fee) to (output + dist) / (1 - fee)
    fee_multiplier = BPS_DENOMINATOR / (BPS_DENOMINATOR - fee_bps)
    input_lo = amount * fee_multiplier
    input_hi = (amount + spread) * fee_multiplier
    if not math.isfinite(input_hi):
        logger.warning("Pre-fee input range exceeds the float range; scoring as 0 bits")
        return 0.0

    bucket = select_bucket(pool, input_lo)
    if bucket is None or bucket.count == 0:
        return 0.0

    n = bucket.count
    mu = bucket.mean
    sigma = math.sqrt(bucket.variance)
    if sigma == 0:
        return 0.0

    effective_k_max = min(k_max, n)
    if k_min > effective_k_max:
        return 0.0

    # CLT: sum of k deposits ~ Normal(k * mu, k * sigma^2)
    # An empty subset sums to nothing; k starts at 1
    ks = np.arange(max(k_min, 1), effective_k_max + 1)
    sum_means = ks * mu
    sum_stds = sigma * np.sqrt(ks)

    z_lo = (input_lo - sum_means) / sum_stds
    z_hi = (input_hi - sum_means) / sum_stds
    p_k = normal_cdf_vector(z_hi) - normal_cdf_vector(z_lo)

    retained = p_k > 0
    if not np.any(retained):
        return 0.0

    # log2(C(n, k) * p_k) = log2(C(n, k)) + log2(p_k)
    log_binoms = np.array([log2_binomial(n, int(k)) for k in ks[retained]])
    log_terms = log_binoms + np.log2(p_k[retained])

    # log-sum-exp in base 2
    max_log_term = np.max(log_terms)
    logger.debug(
        f"Input [{input_lo}, {input_hi}] over bucket [{bucket.lo}, {bucket.hi}): "
        f"{len(log_terms)} terms retained, max log2 term {max_log_term:.3f}"
    )
    result = float(max_log_term + np.log2(np.sum(np.exp2(log_terms - max_log_term))))

    return max(0.0, result)
