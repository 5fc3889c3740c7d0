"""
app/services/query_service.py

List-style filtering and sorting over normalized ESG metrics.

Queries never feed back into the rollups and never modify the metric list
they are given; every call returns a new list.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator

from app.domain.esg_metric import NormalizedMetric
from app.validators.submission_fields import parse_finite_float, timestamp_millis

logger = logging.getLogger(__name__)

ALL_STATUSES = "All"
ALL_YEARS = "all"

_FIELD_ALIASES: dict[str, str] = {
    "companyName": "company_name",
    "sourceIndex": "source_index",
}


class QueryOptions(BaseModel):
    """User-chosen filters and ordering for a metric listing."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )

    status: str = ALL_STATUSES
    search_term: str = ""
    year: int | Literal["all"] = ALL_YEARS
    sort_field: str = "timestamp"
    sort_order: Literal["asc", "desc"] = "asc"

    @field_validator("year", mode="before")
    @classmethod
    def _coerce_year(cls, value: Any) -> Any:
        if value is None:
            return ALL_YEARS
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.lower() == ALL_YEARS:
                return ALL_YEARS
            return int(stripped)
        return value

    @field_validator("status", "sort_field", mode="before")
    @classmethod
    def _strip_selector(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("sort_order", mode="before")
    @classmethod
    def _lower_sort_order(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def toggled(self, field: str) -> "QueryOptions":
        """
        Options after a column-header click: a new field sorts ascending,
        the current field flips direction.
        """

        if field == self.sort_field:
            order = "desc" if self.sort_order == "asc" else "asc"
            return self.model_copy(update={"sort_order": order})
        return self.model_copy(update={"sort_field": field, "sort_order": "asc"})


class QueryService:
    """
    Stateless filter and sort facade.
    """

    def query(
        self,
        metrics: Sequence[NormalizedMetric],
        options: QueryOptions | None = None,
    ) -> list[NormalizedMetric]:
        opts = options or QueryOptions()
        matches = [metric for metric in metrics if _matches(metric, opts)]
        ordered = sorted(
            matches,
            key=_sort_key(opts.sort_field),
            reverse=opts.sort_order == "desc",
        )
        logger.debug(
            "query matched %d of %d metrics (sort=%s %s)",
            len(ordered),
            len(metrics),
            opts.sort_field,
            opts.sort_order,
        )
        return ordered


def query(
    metrics: Sequence[NormalizedMetric],
    options: QueryOptions | None = None,
) -> list[NormalizedMetric]:
    return QueryService().query(metrics, options)


def _matches(metric: NormalizedMetric, opts: QueryOptions) -> bool:
    if opts.status != ALL_STATUSES and metric.status != opts.status:
        return False
    if opts.year != ALL_YEARS and metric.year != opts.year:
        return False
    if not opts.search_term:
        return True

    needle = opts.search_term.lower()
    return any(
        haystack and needle in haystack.lower()
        for haystack in (metric.company_name, metric.metric, metric.category)
    )


def _sort_key(field: str) -> Callable[[NormalizedMetric], Any]:
    if field == "timestamp":
        return lambda metric: timestamp_millis(metric.timestamp)
    if field == "value":
        return lambda metric: parse_finite_float(metric.value) or 0.0

    attribute = _FIELD_ALIASES.get(field, field)

    def generic(metric: NormalizedMetric) -> tuple[int, float, str]:
        raw = getattr(metric, attribute, None)
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return (0, float(raw), "")
        return (1, 0.0, "" if raw is None else str(raw))

    return generic
