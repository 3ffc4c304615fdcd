"""
Score labels and display tables.
"""

import math
import logging
from dataclasses import dataclass
from typing import List, Sequence

from pool.deposit_pool import DepositPoolStats
from scoring.privacy_score import finite_amount, privacy_score


logger = logging.getLogger(__name__)


DEFAULT_DIST_FRACTIONS = (0.0, 0.001, 0.01, 0.05)

# (upper bound exclusive, label), checked in order
LABEL_THRESHOLDS = (
    (10.0, "Critical"),
    (20.0, "Weak"),
    (40.0, "Moderate"),
    (60.0, "Strong"),
)
TOP_LABEL = "Very Strong"


@dataclass
class PrivacyScoreResult:
    """Result of a privacy score computation at a specific dist value."""
    dist: int
    score_bits: float  # Rounded to one decimal
    label: str


def score_label(bits: float) -> str:
    """Human-readable label for a privacy score."""
    for upper, label in LABEL_THRESHOLDS:
        if bits < upper:
            return label
    return TOP_LABEL


def round_score_bits(bits: float) -> float:
    """Round to one decimal, halves rounded up after scaling (0.15 -> 0.2)."""
    return math.floor(bits * 10 + 0.5) / 10


def privacy_score_table(
    output_amount: float,
    pool: DepositPoolStats,
    fee_bps: int,
    k_min: int,
    k_max: int,
    dist_fractions: Sequence[float] = DEFAULT_DIST_FRACTIONS
) -> List[PrivacyScoreResult]:
    """
    Compute privacy scores at multiple dist levels for display.

    Args:
        output_amount: The quantized output amount
        pool: Current deposit pool statistics
        fee_bps: Volume fee in basis points
        k_min: Minimum subset size
        k_max: Maximum subset size (batch size)
        dist_fractions: Fractions of output_amount to use as dist values

    Returns:
        One result per fraction, in the given order. A row whose dist has
        no finite value is reported at dist 0 with a score of 0 bits.
    """
    amount = finite_amount(output_amount)
    if amount is None:
        logger.warning("Output amount is not a finite number; table scores 0 bits")

    results = []
    for fraction in dist_fractions:
        scaled = None if amount is None else finite_amount(amount * fraction)
        if scaled is None:
            dist, bits = 0, 0.0
        else:
            dist = math.floor(scaled)
            bits = privacy_score(output_amount, dist, pool, fee_bps, k_min, k_max)
        results.append(PrivacyScoreResult(
            dist=dist,
            score_bits=round_score_bits(bits),
            label=score_label(bits),
        ))
    return results
