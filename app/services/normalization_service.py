"""
app/services/normalization_service.py

Expansion of stored ESG submissions into single-metric canonical records.

Year resolution
---------------
Strict priority, never raising:

1. ``reportingYear`` when it parses as an integer
2. calendar year of ``timestamp`` (unparseable timestamps use the clock year)
3. the injected clock's current year

Filtering
---------
Malformed values are dropped, not rejected. A metric is only emitted when
its value is a finite number and its category is one of
``environmental``, ``social`` or ``governance``. The ``description`` key of
a nested section is free text and never a metric.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any, Final

from app.domain.clock import Clock, SystemClock
from app.domain.esg_metric import ESG_CATEGORIES, NormalizedMetric
from app.domain.submission import (
    FlatSubmission,
    NestedSubmission,
    SubmissionIdentity,
    decode_submission,
)
from app.validators.submission_fields import (
    parse_finite_float,
    parse_leading_int,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

DESCRIPTION_KEY: Final[str] = "description"


class NormalizationService:
    """
    Turns raw submissions into :class:`NormalizedMetric` records.

    Parameters
    ----------
    clock:
        Source of the fallback "current year". Defaults to UTC wall time.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()

    def normalize(self, entries: Sequence[Mapping[str, Any]]) -> list[NormalizedMetric]:
        metrics: list[NormalizedMetric] = []
        for index, entry in enumerate(entries):
            metrics.extend(self.expand(entry, index))

        logger.debug(
            "normalize produced %d metrics from %d submissions",
            len(metrics),
            len(entries),
        )
        return metrics

    def expand(self, entry: Mapping[str, Any], source_index: int) -> list[NormalizedMetric]:
        """
        Normalize one submission. May return zero, one or many metrics.
        """

        year = self.resolve_year(entry)
        shape = decode_submission(entry)

        if isinstance(shape, NestedSubmission):
            pairs = self._nested_pairs(shape)
        else:
            pairs = self._flat_pairs(shape)

        return [
            _build_metric(shape.identity, category, metric, value, year, source_index)
            for category, metric, value in pairs
        ]

    def resolve_year(self, entry: Mapping[str, Any]) -> int:
        reporting_year = entry.get("reportingYear")
        if reporting_year:
            parsed_year = parse_leading_int(reporting_year)
            if parsed_year is not None:
                return parsed_year

        raw_timestamp = entry.get("timestamp")
        if raw_timestamp:
            parsed = parse_timestamp(raw_timestamp)
            if parsed is not None:
                return parsed.year

        return self._clock.now().year

    @staticmethod
    def _nested_pairs(shape: NestedSubmission) -> Iterator[tuple[str, str, float]]:
        for category, section in shape.sections.items():
            for metric, raw_value in section.items():
                if metric == DESCRIPTION_KEY or raw_value == "":
                    continue
                value = parse_finite_float(raw_value)
                if value is None:
                    continue
                yield category, str(metric), value

    @staticmethod
    def _flat_pairs(shape: FlatSubmission) -> Iterator[tuple[str, str, float]]:
        if shape.category not in ESG_CATEGORIES:
            return
        value = parse_finite_float(shape.value)
        if value is not None:
            yield shape.category, shape.metric, value


def normalize(
    entries: Sequence[Mapping[str, Any]],
    clock: Clock | None = None,
) -> list[NormalizedMetric]:
    return NormalizationService(clock).normalize(entries)


def _build_metric(
    identity: SubmissionIdentity,
    category: str,
    metric: str,
    value: float,
    year: int,
    source_index: int,
) -> NormalizedMetric:
    return NormalizedMetric(
        category=category,
        metric=metric,
        value=value,
        year=year,
        source_index=source_index,
        company_name=identity.company_name,
        sector=identity.sector,
        region=identity.region,
        status=identity.status,
        timestamp=identity.timestamp,
    )
