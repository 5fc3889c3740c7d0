"""
app/services/rollup_service.py

Hierarchical ESG rollups over normalized metrics.

Levels
------
- per year, per category     mean of every metric value in that bucket
- per year, overall          mean of the three category means
- all time                   the same two levels without year grouping

Missing-data policy
-------------------
A category with no data renders as ``"-"``. The composite ``average`` is
all-or-nothing: it is only numeric when all three categories have at least
one data point, otherwise it is ``"-"`` as well. Downstream compliance
scoring reads the sentinel as "insufficient coverage", so a partial
composite is never produced.

Accumulation keeps full float precision; values are formatted to two
decimals once, when the aggregate is built.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from app.domain.esg_metric import (
    ESG_CATEGORIES,
    NO_DATA,
    NormalizedMetric,
    OverallAggregate,
    YearlyAggregate,
)

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


@dataclass
class YearBucket:
    """Running sum and count for one ``(year, category)`` cell."""

    total: float = 0.0
    count: int = 0

    def add(self, value: float) -> None:
        self.total += value
        self.count += 1

    def mean(self) -> float | None:
        if self.count == 0:
            return None
        return self.total / self.count


@dataclass
class CategoryBuckets:
    buckets: dict[str, YearBucket] = field(
        default_factory=lambda: {category: YearBucket() for category in ESG_CATEGORIES}
    )

    def add(self, metric: NormalizedMetric) -> None:
        bucket = self.buckets.get(metric.category)
        if bucket is not None:
            bucket.add(metric.value)

    def summarize(self) -> dict[str, str]:
        means = {category: bucket.mean() for category, bucket in self.buckets.items()}
        summary = {category: _format(mean) for category, mean in means.items()}

        if all(mean is not None for mean in means.values()):
            composite = sum(means.values()) / len(means)  # type: ignore[arg-type]
            summary["average"] = _format(composite)
        else:
            summary["average"] = NO_DATA
        return summary


class RollupService:
    """
    Stateless aggregation of :class:`NormalizedMetric` records.
    """

    def aggregate_by_year(self, metrics: Iterable[NormalizedMetric]) -> list[YearlyAggregate]:
        """
        Return one :class:`YearlyAggregate` per year present, ascending by year.
        """

        by_year: dict[int, CategoryBuckets] = {}
        for metric in metrics:
            by_year.setdefault(metric.year, CategoryBuckets()).add(metric)

        rollups = [
            YearlyAggregate(year=year, **buckets.summarize())
            for year, buckets in sorted(by_year.items())
        ]
        logger.debug("aggregate_by_year produced %d yearly rollups", len(rollups))
        return rollups

    def aggregate_overall(self, metrics: Iterable[NormalizedMetric]) -> OverallAggregate:
        buckets = CategoryBuckets()
        for metric in metrics:
            buckets.add(metric)
        return OverallAggregate(**buckets.summarize())

    @staticmethod
    def available_years(metrics: Sequence[NormalizedMetric]) -> list[int]:
        """Distinct years carrying data, most recent first."""
        return sorted({metric.year for metric in metrics}, reverse=True)


def aggregate_by_year(metrics: Iterable[NormalizedMetric]) -> list[YearlyAggregate]:
    return RollupService().aggregate_by_year(metrics)


def aggregate_overall(metrics: Iterable[NormalizedMetric]) -> OverallAggregate:
    return RollupService().aggregate_overall(metrics)


def _format(value: float | None) -> str:
    if value is None:
        return NO_DATA
    # Exact binary ties round away from zero; "+ 0.0" drops a negative zero.
    rounded = Decimal(value + 0.0).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return format(rounded, "f")
