"""
Tests for minimum-dist calibration, score labels, score tables and the
config-bound scorer.
"""

import math

import pytest

from core.config import ScoreConfig
from pool.deposit_pool import add_deposit, create_pool
from scoring.calibrator import find_min_dist
from scoring.labeler import (
    PrivacyScoreResult,
    privacy_score_table,
    round_score_bits,
    score_label,
)
from scoring.privacy_score import privacy_score
from scoring.scorer import PrivacyScorer


FEE_BPS = 10
K_MIN = 1
K_MAX = 16


def make_pool(deposits):
    pool = create_pool()
    for amount in deposits:
        add_deposit(pool, amount)
    return pool


@pytest.fixture
def spread_pool():
    """500 evenly spread deposits, 100..1098."""
    return make_pool(100 + i * 2 for i in range(500))


# ----------------------------------------------------------------------------
# find_min_dist
# ----------------------------------------------------------------------------

def test_find_min_dist_returns_zero_if_already_achieved(spread_pool):
    assert find_min_dist(500, spread_pool, FEE_BPS, K_MIN, K_MAX, 0.0) == 0


def test_find_min_dist_returns_none_if_unreachable():
    # With only 1 deposit, 100 bits is out of reach
    pool = make_pool([100])

    assert find_min_dist(50, pool, FEE_BPS, K_MIN, K_MAX, 100) is None


def test_find_min_dist_returns_none_on_empty_pool():
    assert find_min_dist(500, create_pool(), FEE_BPS, K_MIN, K_MAX, 1.0) is None


def test_find_min_dist_finds_smallest_sufficient_dist(spread_pool):
    target = 10.0

    dist = find_min_dist(500, spread_pool, FEE_BPS, K_MIN, K_MAX, target, max_dist_fraction=0.5)

    assert dist is not None
    assert 0 < dist <= 250
    assert privacy_score(500, dist, spread_pool, FEE_BPS, K_MIN, K_MAX) >= target
    assert privacy_score(500, dist - 1, spread_pool, FEE_BPS, K_MIN, K_MAX) < target


def test_find_min_dist_respects_max_fraction(spread_pool):
    dist = find_min_dist(500, spread_pool, FEE_BPS, K_MIN, K_MAX, 10.0, max_dist_fraction=0.5)

    # Capping the sacrifice below the found dist makes the target unreachable
    capped = (dist - 1) / 500
    assert find_min_dist(500, spread_pool, FEE_BPS, K_MIN, K_MAX, 10.0, max_dist_fraction=capped) is None


@pytest.mark.parametrize("output_amount", [float('nan'), float('inf'), float('-inf'), 10 ** 400])
def test_find_min_dist_returns_none_for_non_finite_output(spread_pool, output_amount):
    assert find_min_dist(output_amount, spread_pool, FEE_BPS, K_MIN, K_MAX, 10.0) is None
    assert find_min_dist(output_amount, spread_pool, FEE_BPS, K_MIN, K_MAX, 0.0) is None


# ----------------------------------------------------------------------------
# score_label
# ----------------------------------------------------------------------------

@pytest.mark.parametrize("bits, label", [
    (0, "Critical"),
    (5, "Critical"),
    (9.9, "Critical"),
    (10, "Weak"),
    (19.9, "Weak"),
    (20, "Moderate"),
    (39.9, "Moderate"),
    (40, "Strong"),
    (59.9, "Strong"),
    (60, "Very Strong"),
    (250, "Very Strong"),
])
def test_score_label_thresholds(bits, label):
    assert score_label(bits) == label


# ----------------------------------------------------------------------------
# privacy_score_table
# ----------------------------------------------------------------------------

def test_table_has_one_result_per_fraction():
    pool = make_pool(100 + i for i in range(200))

    table = privacy_score_table(150, pool, FEE_BPS, K_MIN, K_MAX)

    assert len(table) == 4  # default fractions
    assert all(isinstance(row, PrivacyScoreResult) for row in table)
    assert [row.dist for row in table] == [0, 0, 1, 7]
    assert table[0].score_bits == 0
    assert table[0].label == "Critical"

    # Scores should be non-decreasing
    for prev, row in zip(table, table[1:]):
        assert row.score_bits >= prev.score_bits


def test_table_rounds_to_one_decimal_and_labels_raw_bits():
    pool = make_pool(100 + i * 2 for i in range(500))
    fractions = [0.1, 0.4]

    table = privacy_score_table(500, pool, FEE_BPS, K_MIN, K_MAX, dist_fractions=fractions)

    for fraction, row in zip(fractions, table):
        bits = privacy_score(500, row.dist, pool, FEE_BPS, K_MIN, K_MAX)
        assert row.dist == int(500 * fraction)
        assert row.score_bits == math.floor(bits * 10 + 0.5) / 10
        assert row.label == score_label(bits)


@pytest.mark.parametrize("bits, rounded", [
    (0.0, 0.0),
    (0.15, 0.2),
    (12.25, 12.3),
    (12.24, 12.2),
    (39.96, 40.0),
])
def test_score_bits_round_half_up(bits, rounded):
    assert round_score_bits(bits) == pytest.approx(rounded)


@pytest.mark.parametrize("output_amount", [float('nan'), float('inf'), 10 ** 400])
def test_table_for_non_finite_output_scores_zero(output_amount):
    pool = make_pool(100 + i for i in range(200))

    table = privacy_score_table(output_amount, pool, FEE_BPS, K_MIN, K_MAX)

    assert len(table) == 4
    for row in table:
        assert row == PrivacyScoreResult(dist=0, score_bits=0.0, label="Critical")


# ----------------------------------------------------------------------------
# PrivacyScorer
# ----------------------------------------------------------------------------

def test_scorer_delegates_with_config(spread_pool):
    config = ScoreConfig(fee_bps=25, k_min=2, k_max=8, dist_fractions=[0.0, 0.2])
    scorer = PrivacyScorer(spread_pool, config)

    assert scorer.score(500, 100) == privacy_score(500, 100, spread_pool, 25, 2, 8)
    assert [row.dist for row in scorer.table(500)] == [0, 100]


def test_scorer_min_dist_uses_configured_target(spread_pool):
    config = ScoreConfig(target_bits=10.0, max_dist_fraction=0.5)
    scorer = PrivacyScorer(spread_pool, config)

    expected = find_min_dist(500, spread_pool, FEE_BPS, K_MIN, K_MAX, 10.0, max_dist_fraction=0.5)
    assert scorer.min_dist(500) == expected
    assert scorer.min_dist(500, target_bits=1000.0) is None


def test_scorer_sees_live_pool_updates():
    pool = create_pool()
    scorer = PrivacyScorer(pool)
    assert scorer.score(500, 200) == 0

    for i in range(500):
        add_deposit(pool, 100 + i * 2)
    assert scorer.score(500, 200) > 0


def test_scorer_rejects_invalid_config(spread_pool):
    with pytest.raises(ValueError):
        PrivacyScorer(spread_pool, ScoreConfig(k_min=4, k_max=2))
