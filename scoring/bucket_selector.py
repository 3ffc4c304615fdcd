"""
Bucket selection for a target input amount.

The score models a candidate input as a sum of k same-magnitude deposits, so
the bucket used for the model should be the one where the target sits
closest to the top of the range: enough deposits of the right order of
magnitude to reach it in at most k_max steps, and none larger than it.
"""

import math
import logging
from typing import Optional

from pool.deposit_pool import DepositPoolStats, PoolBucket


logger = logging.getLogger(__name__)


def select_bucket(pool: DepositPoolStats, target: float) -> Optional[PoolBucket]:
    """
    Choose the best-fit bucket for a target amount.

    Among non-empty buckets with lo <= target < hi, returns the one with the
    smallest headroom hi - target. Unbounded buckets have infinite headroom.
    Ties keep the earliest bucket in schema order.

    Args:
        pool: Deposit pool
        target: Pre-fee input amount

    Returns:
        The selected bucket, or None if no non-empty bucket contains target
    """
    best: Optional[PoolBucket] = None
    best_headroom = math.inf

    for bucket in pool.buckets:
        if bucket.count == 0 or not bucket.contains(target):
            continue

        headroom = math.inf if bucket.hi is None else bucket.hi - target
        if best is None or headroom < best_headroom:
            best = bucket
            best_headroom = headroom

    if best is None:
        logger.debug(f"No non-empty bucket contains {target}")
    else:
        logger.debug(f"Selected bucket [{best.lo}, {best.hi}) for {target} (count={best.count})")

    return best
