"""
app/domain/esg_metric.py

Canonical ESG metric and rollup types produced by the reporting pipeline.

None of these values are persisted: they are recomputed from the stored
submission set on every pipeline run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final


class EsgCategory:
    ENVIRONMENTAL = "environmental"
    SOCIAL = "social"
    GOVERNANCE = "governance"


ESG_CATEGORIES: Final[tuple[str, ...]] = (
    EsgCategory.ENVIRONMENTAL,
    EsgCategory.SOCIAL,
    EsgCategory.GOVERNANCE,
)
"""Canonical category order used for expansion and rollups."""

NO_DATA: Final[str] = "-"
"""Sentinel rendered in place of an average when no qualifying data exists."""


@dataclass(frozen=True)
class NormalizedMetric:
    """
    One canonical ``(category, metric, value, year)`` fact.

    ``source_index`` is the position of the originating submission in the
    list handed to the normalizer; callers use it to delete the submission
    by identity. ``status`` and ``timestamp`` are carried over untouched
    for the list-style query layer.
    """

    category: str
    metric: str
    value: float
    year: int
    source_index: int
    company_name: str | None = None
    sector: str | None = None
    region: str | None = None
    status: str | None = None
    timestamp: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "companyName": self.company_name,
            "sector": self.sector,
            "region": self.region,
            "category": self.category,
            "metric": self.metric,
            "value": self.value,
            "year": self.year,
            "sourceIndex": self.source_index,
            "status": self.status,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class OverallAggregate:
    """
    Per-category means and composite average over a metric set.

    Every field is either a two-decimal numeric string or :data:`NO_DATA`.
    """

    environmental: str = NO_DATA
    social: str = NO_DATA
    governance: str = NO_DATA
    average: str = NO_DATA

    @property
    def has_average(self) -> bool:
        return self.average != NO_DATA

    def to_dict(self) -> dict[str, str]:
        return {
            "environmental": self.environmental,
            "social": self.social,
            "governance": self.governance,
            "average": self.average,
        }


@dataclass(frozen=True)
class YearlyAggregate(OverallAggregate):
    """
    :class:`OverallAggregate` restricted to a single resolved year.
    """

    year: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"year": self.year, **super().to_dict()}
