"""Batch statistics over normalized transactions.

Every function here is pure and can be called on its own;
compute_batch_statistics composes them into the BatchStatistics snapshot
that risk scoring reads.
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field

from transaction_screener.models.risk import BatchStatistics
from transaction_screener.models.transaction import CanonicalTransaction
from transaction_screener.utils.date_utils import iso_week_key
from transaction_screener.utils.logging_config import get_logger

logger = get_logger(__name__)

HOURS_PER_DAY = 24

# Hours at or above this fraction of the mean per-hour count are peak hours
PEAK_HOUR_RATIO = 0.5

# Peak sets smaller than this are widened by one hour on each side
MIN_PEAK_HOURS = 6

UNKNOWN_CATEGORY = "Unknown"


@dataclass
class HourDistribution:
    """Per-hour transaction counts and the derived peak hours."""

    hour_counts: list[int]
    peak_hours: frozenset[int]


@dataclass
class WeeklyFrequency:
    """Transaction counts per ISO week."""

    weekly_avg: float = 0.0
    current_week_count: int = 0
    weekly_counts: dict[str, int] = field(default_factory=dict)


def calculate_mean(values: list[float]) -> float:
    """Arithmetic mean, 0 for an empty list."""
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


def calculate_std_dev(values: list[float]) -> float:
    """Population standard deviation: sqrt(sum((x - mean)^2) / N).

    Args:
        values: Numeric values.

    Returns:
        Standard deviation, 0 for fewer than 2 values.
    """
    if len(values) < 2:
        return 0.0
    mean = calculate_mean(values)
    return math.sqrt(math.fsum((v - mean) ** 2 for v in values) / len(values))


def calculate_z_score(value: float, mean: float, std_dev: float) -> float:
    """Signed distance from the mean in standard deviations.

    Returns 0 when std_dev is 0 (all values identical, no deviation).
    """
    if std_dev == 0:
        return 0.0
    return (value - mean) / std_dev


def absolute_amounts(transactions: list[CanonicalTransaction]) -> list[float]:
    """Absolute transaction amounts as floats."""
    return [float(txn.absolute_amount) for txn in transactions]


def group_and_sum(transactions: list[CanonicalTransaction]) -> dict[str, float]:
    """Sum absolute amounts per category.

    Args:
        transactions: Normalized transactions.

    Returns:
        Category -> total absolute amount, in first-seen order.
    """
    totals: dict[str, float] = defaultdict(float)
    for txn in transactions:
        totals[txn.category or UNKNOWN_CATEGORY] += float(txn.absolute_amount)
    return dict(totals)


def category_average_spending(category_totals: dict[str, float]) -> dict[str, float]:
    """Assign the batch-wide mean category total to every category.

    This is not a per-category baseline: every category is compared against
    the same average of all category totals.

    Args:
        category_totals: Output of group_and_sum.

    Returns:
        Category -> mean of all category totals (empty if no categories).
    """
    if not category_totals:
        return {}
    average = calculate_mean(list(category_totals.values()))
    return {category: average for category in category_totals}


def build_hour_distribution(transactions: list[CanonicalTransaction]) -> HourDistribution:
    """Count transactions per hour of day and derive peak hours.

    Peak hours are those with at least PEAK_HOUR_RATIO of the mean per-hour
    count. Fewer than MIN_PEAK_HOURS peak hours are widened by adding each
    one's neighbours (wrapping at midnight). With no dated transactions every
    hour is a peak hour.

    Args:
        transactions: Normalized transactions.

    Returns:
        HourDistribution with 24 counts and the peak hour set.
    """
    hour_counts = [0] * HOURS_PER_DAY
    for txn in transactions:
        if txn.date is not None:
            hour_counts[txn.date.hour] += 1

    total = sum(hour_counts)
    if total == 0:
        return HourDistribution(hour_counts, frozenset(range(HOURS_PER_DAY)))

    avg_per_hour = total / HOURS_PER_DAY
    peak = {h for h in range(HOURS_PER_DAY) if hour_counts[h] >= avg_per_hour * PEAK_HOUR_RATIO}

    if len(peak) < MIN_PEAK_HOURS:
        expanded = set(peak)
        for h in peak:
            expanded.add((h - 1) % HOURS_PER_DAY)
            expanded.add((h + 1) % HOURS_PER_DAY)
        peak = expanded

    return HourDistribution(hour_counts, frozenset(peak))


def calculate_weekly_frequency(transactions: list[CanonicalTransaction]) -> WeeklyFrequency:
    """Bucket transactions by ISO week.

    Args:
        transactions: Normalized transactions.

    Returns:
        WeeklyFrequency; current_week_count is the count for the
        lexicographically greatest YYYY-Www key.
    """
    counts: dict[str, int] = defaultdict(int)
    for txn in transactions:
        if txn.date is not None:
            counts[iso_week_key(txn.date)] += 1

    if not counts:
        return WeeklyFrequency()

    weekly_counts = {week: counts[week] for week in sorted(counts)}
    latest_week = max(weekly_counts)
    return WeeklyFrequency(
        weekly_avg=calculate_mean([float(c) for c in weekly_counts.values()]),
        current_week_count=weekly_counts[latest_week],
        weekly_counts=weekly_counts,
    )


def compute_batch_statistics(transactions: list[CanonicalTransaction]) -> BatchStatistics:
    """Compute the full statistics snapshot for a batch.

    Args:
        transactions: Normalized transactions.

    Returns:
        Immutable BatchStatistics.
    """
    amounts = absolute_amounts(transactions)
    mean = calculate_mean(amounts)
    std_dev = calculate_std_dev(amounts)
    logger.info(f"Amount stats: mean={mean:.2f}, stdDev={std_dev:.2f}")

    category_totals = group_and_sum(transactions)
    logger.info(f"Categories found: {len(category_totals)} ({', '.join(category_totals)})")

    hours = build_hour_distribution(transactions)
    logger.info(f"Peak hours: {', '.join(str(h) for h in sorted(hours.peak_hours))}")

    weekly = calculate_weekly_frequency(transactions)
    logger.info(
        f"Weekly frequency: avg={weekly.weekly_avg:.1f}, current={weekly.current_week_count}"
    )

    return BatchStatistics(
        mean=mean,
        std_dev=std_dev,
        peak_hours=hours.peak_hours,
        category_totals=category_totals,
        category_avg_spending=category_average_spending(category_totals),
        weekly_avg=weekly.weekly_avg,
        current_week_count=weekly.current_week_count,
    )
