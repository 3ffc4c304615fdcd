"""
Deposit Pool Statistics for Wormhole Privacy Scoring.

Defines the bucketed pool structure that the chain indexer maintains
incrementally as deposits arrive and deposit accounts are spent.

Each bucket covers a half-open amount range and keeps three exact
aggregates: deposit count, sum of amounts and sum of squared amounts.
Buckets overlap (each doubling bucket is 16x wide), so a single deposit
is attributed to every bucket whose range contains it.
"""

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Tuple


logger = logging.getLogger(__name__)


# Width ratio hi/lo of every doubling bucket
BUCKET_WIDTH = 16

# Wire-format keys (shared with the wallet/explorer JSON API)
RECORD_KEYS = ('lo', 'hi', 'count', 'sumAmounts', 'sumAmountsSquared')


@dataclass(frozen=True)
class BucketSchema:
    """
    Fixed, ordered amount ranges of a deposit pool.

    A range is (lo, hi) with hi=None meaning unbounded. Schemas are
    immutable and shared by every pool built from the same layout.
    """
    ranges: Tuple[Tuple[int, Optional[int]], ...]

    def __len__(self) -> int:
        return len(self.ranges)

    @staticmethod
    @lru_cache(maxsize=None)
    def standard(unit: int, num_buckets: int) -> 'BucketSchema':
        """
        Standard overlapping schema.

        [0, unit), then [2^i * unit, 2^i * 16 * unit) for i in 0..num_buckets-1,
        with the last bucket unbounded above.
        """
        ranges: List[Tuple[int, Optional[int]]] = [(0, unit)]
        for i in range(num_buckets):
            lo = (2 ** i) * unit
            hi = lo * BUCKET_WIDTH if i < num_buckets - 1 else None
            ranges.append((lo, hi))
        return BucketSchema(tuple(ranges))

    @staticmethod
    def flat() -> 'BucketSchema':
        """Single unbounded bucket: whole-pool statistics, no bucketing."""
        return BucketSchema(((0, None),))


@dataclass
class PoolBucket:
    """Aggregates of the deposits attributed to one amount range."""
    lo: int
    hi: Optional[int]
    count: int = 0
    sum_amounts: int = 0
    sum_amounts_squared: int = 0

    def contains(self, amount) -> bool:
        """Check lo <= amount < hi."""
        return self.lo <= amount and (self.hi is None or amount < self.hi)

    @property
    def mean(self) -> float:
        """Mean deposit amount (0 for an empty bucket)."""
        if self.count == 0:
            return 0.0
        return self.sum_amounts / self.count

    @property
    def variance(self) -> float:
        """
        Population variance of deposit amounts.

        Computed as (n * sum(x^2) - sum(x)^2) / n^2 in exact integers, so the
        only rounding is the final division. Floored at 0: clamped removals
        can leave aggregates that no real deposit set would produce.
        """
        if self.count == 0:
            return 0.0
        numerator = self.count * self.sum_amounts_squared - self.sum_amounts * self.sum_amounts
        if numerator <= 0:
            return 0.0
        return numerator / (self.count * self.count)

    @property
    def stddev(self) -> float:
        """
        Standard deviation of deposit amounts, the square root of variance.

        0 for a single real deposit; a bucket left by clamped removals may
        report a spread with one deposit, matching what the scorer uses.
        """
        return self.variance ** 0.5

    def to_record(self) -> Dict[str, Any]:
        """Wire record; sums as decimal strings to survive JSON number limits."""
        return {
            'lo': self.lo,
            'hi': self.hi,
            'count': self.count,
            'sumAmounts': str(self.sum_amounts),
            'sumAmountsSquared': str(self.sum_amounts_squared),
        }


def _record_int(value) -> int:
    """Parse an integer record field; fractional floats are rejected, not truncated."""
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"expected an integer, got {value!r}")
    return int(value)


class DepositPoolStats:
    """
    Bucketed statistics of the unconsumed wormhole deposit pool.

    Removal events cannot be matched to the deposits they consume, so
    removals are applied as a conservative approximation: every aggregate
    is clamped at zero rather than allowed to go negative.

    Not thread-safe; callers serialize writers.
    """

    def __init__(self, schema: Optional[BucketSchema] = None):
        """
        Initialize an empty pool.

        Args:
            schema: Bucket layout. Defaults to the standard layout of the
                default PoolConfig.
        """
        if schema is None:
            from core.config import PoolConfig
            schema = PoolConfig().schema()

        self.schema = schema
        self.buckets: List[PoolBucket] = [PoolBucket(lo, hi) for lo, hi in schema.ranges]

    def add_deposit(self, amount: int) -> None:
        """Attribute a deposit to every bucket whose range contains it."""
        amount_sq = amount * amount
        for bucket in self.buckets:
            if bucket.contains(amount):
                bucket.count += 1
                bucket.sum_amounts += amount
                bucket.sum_amounts_squared += amount_sq

    def add_deposits(self, amounts: Iterable[int]) -> None:
        """Add many deposits, e.g. when an indexer replays history."""
        for amount in amounts:
            self.add_deposit(int(amount))

    def remove_deposit(self, amount: int) -> None:
        """Remove a deposit from every containing bucket, clamping at zero."""
        amount_sq = amount * amount
        for bucket in self.buckets:
            if not bucket.contains(amount):
                continue

            if bucket.count == 0 or bucket.sum_amounts < amount:
                logger.debug(
                    f"Clamping bucket [{bucket.lo}, {bucket.hi}) on removal of {amount} "
                    f"(count={bucket.count})"
                )

            bucket.count = max(0, bucket.count - 1)
            bucket.sum_amounts = max(0, bucket.sum_amounts - amount)
            bucket.sum_amounts_squared = max(0, bucket.sum_amounts_squared - amount_sq)

    @property
    def non_empty_buckets(self) -> int:
        """Number of buckets holding at least one deposit."""
        return sum(1 for b in self.buckets if b.count > 0)

    def copy(self) -> 'DepositPoolStats':
        """Create a deep copy of the pool (the schema is shared)."""
        new_pool = DepositPoolStats(self.schema)
        for src, dst in zip(self.buckets, new_pool.buckets):
            dst.count = src.count
            dst.sum_amounts = src.sum_amounts
            dst.sum_amounts_squared = src.sum_amounts_squared
        return new_pool

    def to_records(self) -> List[Dict[str, Any]]:
        """Serialize buckets in schema order."""
        return [bucket.to_record() for bucket in self.buckets]

    @classmethod
    def from_records(cls, records: List[Dict[str, Any]]) -> 'DepositPoolStats':
        """
        Restore a pool from wire records.

        The schema is rebuilt from the records' ranges, so a pool restores
        with the layout it was saved with.

        Raises:
            ValueError: If a record is missing keys or holds invalid values.
        """
        ranges = []
        stats = []
        for i, record in enumerate(records):
            if not isinstance(record, dict):
                raise ValueError(f"Bucket record {i} is not an object: {type(record).__name__}")

            missing = [key for key in RECORD_KEYS if key not in record]
            if missing:
                raise ValueError(f"Bucket record {i} missing keys: {missing}")

            try:
                lo = _record_int(record['lo'])
                hi = None if record['hi'] is None else _record_int(record['hi'])
                count = _record_int(record['count'])
                sum_amounts = int(str(record['sumAmounts']))
                sum_amounts_sq = int(str(record['sumAmountsSquared']))
            except (TypeError, ValueError) as e:
                raise ValueError(f"Bucket record {i} is malformed: {e}") from e

            if min(count, sum_amounts, sum_amounts_sq) < 0:
                raise ValueError(f"Bucket record {i} has negative statistics")
            if hi is not None and hi <= lo:
                raise ValueError(f"Bucket record {i} has empty range [{lo}, {hi})")

            ranges.append((lo, hi))
            stats.append((count, sum_amounts, sum_amounts_sq))

        pool = cls(BucketSchema(tuple(ranges)))
        for bucket, (count, sum_amounts, sum_amounts_sq) in zip(pool.buckets, stats):
            bucket.count = count
            bucket.sum_amounts = sum_amounts
            bucket.sum_amounts_squared = sum_amounts_sq

        logger.info(f"Restored deposit pool: {len(pool.buckets)} buckets, "
                    f"{pool.non_empty_buckets} non-empty")
        return pool

    def to_json(self) -> str:
        """Serialize to a JSON string."""
        return json.dumps(self.to_records())

    @classmethod
    def from_json(cls, payload: str) -> 'DepositPoolStats':
        """Restore from a JSON string produced by to_json()."""
        records = json.loads(payload)
        if not isinstance(records, list):
            raise ValueError("Pool JSON must be a list of bucket records")
        return cls.from_records(records)

    def to_dataframe(self):
        """
        Convert bucket statistics to a pandas DataFrame.

        Returns:
            pandas DataFrame with one row per bucket
        """
        try:
            import pandas as pd
        except ImportError:
            raise ImportError("pandas required for to_dataframe()")

        columns = ['lo', 'hi', 'count', 'sum_amounts', 'sum_amounts_squared', 'mean', 'stddev']

        # Object dtype keeps Python ints exact and the unbounded hi as None
        data = {
            'lo': [b.lo for b in self.buckets],
            'hi': pd.Series([b.hi for b in self.buckets], dtype=object),
            'count': [b.count for b in self.buckets],
            'sum_amounts': pd.Series([b.sum_amounts for b in self.buckets], dtype=object),
            'sum_amounts_squared': pd.Series([b.sum_amounts_squared for b in self.buckets], dtype=object),
            'mean': [b.mean for b in self.buckets],
            'stddev': [b.stddev for b in self.buckets],
        }
        return pd.DataFrame(data, columns=columns)

    def summary(self) -> str:
        """Generate a summary of the pool."""
        lines = [
            "=" * 60,
            "Deposit Pool Summary",
            "=" * 60,
            f"Buckets: {len(self.buckets)}",
            f"Non-Empty Buckets: {self.non_empty_buckets}",
            "",
            "Bucket Statistics:"
        ]

        for bucket in self.buckets:
            if bucket.count == 0:
                continue
            hi = "inf" if bucket.hi is None else f"{bucket.hi:,}"
            lines.append(
                f"  [{bucket.lo:,}, {hi}): count={bucket.count:,} "
                f"mean={bucket.mean:,.2f} stddev={bucket.stddev:,.2f}"
            )

        lines.append("=" * 60)
        return "\n".join(lines)


def create_pool(schema: Optional[BucketSchema] = None) -> DepositPoolStats:
    """Create an empty deposit pool."""
    return DepositPoolStats(schema)


def add_deposit(pool: DepositPoolStats, amount: int) -> None:
    """Add a deposit to the pool stats."""
    pool.add_deposit(amount)


def remove_deposit(pool: DepositPoolStats, amount: int) -> None:
    """Remove a deposit from the pool stats (e.g., account made a non-wormhole outgoing tx)."""
    pool.remove_deposit(amount)
