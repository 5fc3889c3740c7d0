"""
app/services/esg_pipeline.py

ESG reporting pipeline orchestrator.

Wires the stored submission snapshot through every stage in a fixed order:

    SubmissionStore → prepare → DeduplicationService → NormalizationService
                                                     → RollupService
                                                     → QueryService (listings)

Every run re-reads the complete submission set and recomputes from
scratch. Nothing is cached between runs; the newest completed run is the
one callers should display.

Failure contract
----------------
- Listing failure       → logged, returns :meth:`PipelineResult.empty`
                          (never a partial aggregate)
- Malformed submissions → silently contribute no metrics
- Delete / replace      → store errors propagate to the caller
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from app.config import EngineSettings, get_engine_settings
from app.domain.clock import Clock, SystemClock
from app.domain.esg_metric import NormalizedMetric, OverallAggregate, YearlyAggregate
from app.logging_utils import log_event
from app.repositories.submission_store import SubmissionStore, build_submission_store
from app.services.deduplication_service import DeduplicationService
from app.services.normalization_service import NormalizationService
from app.services.query_service import QueryOptions, QueryService
from app.services.rollup_service import RollupService
from db.repositories.errors import SubmissionStoreError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PipelineResult:
    """
    Everything a report or dashboard renderer needs from one run.

    ``submissions`` are the deduplicated entries handed to the normalizer;
    a metric's ``source_index`` points into that list, and
    ``stored_positions`` maps it back to the store's listing order.
    """

    submissions: list[dict[str, Any]]
    metrics: list[NormalizedMetric]
    yearly: list[YearlyAggregate]
    overall: OverallAggregate
    available_years: list[int]
    default_year: int
    computed_at: datetime
    stored_positions: list[int] = field(default_factory=list)

    @classmethod
    def empty(cls, now: datetime) -> "PipelineResult":
        return cls(
            submissions=[],
            metrics=[],
            yearly=[],
            overall=OverallAggregate(),
            available_years=[],
            default_year=now.year,
            computed_at=now,
        )

    @property
    def is_empty(self) -> bool:
        return not self.metrics

    def stored_index(self, source_index: int) -> int:
        """Translate a metric's ``source_index`` into the store's index."""
        return self.stored_positions[source_index]

    def to_report_payload(self) -> dict[str, Any]:
        return {
            "metrics": [metric.to_dict() for metric in self.metrics],
            "yearly": [rollup.to_dict() for rollup in self.yearly],
            "overall": self.overall.to_dict(),
            "availableYears": list(self.available_years),
            "defaultYear": self.default_year,
            "computedAt": self.computed_at.isoformat(),
        }


@dataclass(frozen=True)
class DuplicateRemovalReport:
    before: int
    after: int

    @property
    def removed(self) -> int:
        return self.before - self.after


@dataclass(frozen=True)
class ComplianceScore:
    """Outcome reported by an external framework-compliance scorer."""

    compliance_score: float
    met_requirements: int
    total_requirements: int


class ComplianceScorer(Protocol):
    def score(self, metrics: Sequence[NormalizedMetric]) -> ComplianceScore:
        ...


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class EsgReportingPipeline:
    """
    Recomputes canonical ESG metrics and rollups from a submission store.

    Parameters
    ----------
    store:
        Persistence collaborator holding raw submissions.
    clock:
        Time source for year fallbacks and ``computed_at``.
    settings:
        Engine settings; defaults to :func:`app.config.get_engine_settings`.
    """

    def __init__(
        self,
        store: SubmissionStore,
        *,
        clock: Clock | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._settings = settings or get_engine_settings()
        self._deduplicator = DeduplicationService()
        self._normalizer = NormalizationService(self._clock)
        self._rollups = RollupService()
        self._query_service = QueryService()

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    def run(self) -> PipelineResult:
        now = self._clock.now()
        try:
            snapshot = self._store.list_submissions()
        except SubmissionStoreError as exc:
            log_event(
                logger,
                logging.WARNING,
                "esg_pipeline_store_unavailable",
                error=str(exc),
            )
            return PipelineResult.empty(now)

        prepared = [self._prepare(entry) for entry in snapshot]
        deduped, positions = self._dedupe_with_positions(prepared)
        metrics = self._normalizer.normalize(deduped)
        years = self._rollups.available_years(metrics)

        result = PipelineResult(
            submissions=deduped,
            metrics=metrics,
            yearly=self._rollups.aggregate_by_year(metrics),
            overall=self._rollups.aggregate_overall(metrics),
            available_years=years,
            default_year=years[0] if years else now.year,
            computed_at=now,
            stored_positions=positions,
        )

        log_event(
            logger,
            logging.INFO,
            "esg_pipeline_run",
            stored=len(snapshot),
            deduplicated=len(deduped),
            metrics=len(metrics),
            years=years,
            overall_average=result.overall.average,
        )
        return result

    def query(
        self,
        options: QueryOptions | None = None,
        *,
        result: PipelineResult | None = None,
    ) -> list[NormalizedMetric]:
        """
        Filtered, sorted metric listing. Runs the pipeline unless a
        completed *result* is supplied.
        """

        source = result if result is not None else self.run()
        return self._query_service.query(source.metrics, options)

    def score_compliance(
        self,
        scorers: Mapping[str, ComplianceScorer],
        *,
        result: PipelineResult | None = None,
    ) -> dict[str, ComplianceScore]:
        """
        Feed normalized metrics (never raw submissions) to each framework scorer.
        """

        source = result if result is not None else self.run()
        return {name: scorer.score(source.metrics) for name, scorer in scorers.items()}

    # ------------------------------------------------------------------
    # Mutations (forwarded to the store)
    # ------------------------------------------------------------------

    def delete_submission(self, source_index: int) -> None:
        """Delete by the store's own listing index."""
        self._store.delete_submission(source_index)

    def delete_metric_source(self, metric: NormalizedMetric, result: PipelineResult) -> None:
        """
        Delete the stored submission that produced *metric* in *result*.
        """

        stored_index = result.stored_index(metric.source_index)
        self._store.delete_submission(stored_index)
        logger.info(
            "Deleted source of metric=%r category=%s stored_index=%d",
            metric.metric,
            metric.category,
            stored_index,
        )

    def remove_duplicates(self) -> DuplicateRemovalReport:
        """
        Collapse duplicates in the store itself. The store is only rewritten
        when at least one duplicate was found.
        """

        snapshot = self._store.list_submissions()
        prepared = [self._prepare(entry) for entry in snapshot]
        _, positions = self._dedupe_with_positions(prepared)
        report = DuplicateRemovalReport(before=len(snapshot), after=len(positions))

        if report.removed:
            self._store.replace_submissions([snapshot[index] for index in positions])

        log_event(
            logger,
            logging.INFO,
            "esg_duplicates_removed",
            before=report.before,
            after=report.after,
            removed=report.removed,
        )
        return report

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _prepare(self, entry: Mapping[str, Any]) -> dict[str, Any]:
        prepared = dict(entry)
        if not prepared.get("status"):
            prepared["status"] = self._settings.default_status
        if not prepared.get("timestamp") and prepared.get("submissionDate"):
            prepared["timestamp"] = prepared["submissionDate"]
        return prepared

    def _dedupe_with_positions(
        self,
        prepared: list[dict[str, Any]],
    ) -> tuple[list[dict[str, Any]], list[int]]:
        index_by_identity = {id(entry): index for index, entry in enumerate(prepared)}
        deduped = self._deduplicator.dedupe(prepared)
        positions = [index_by_identity[id(entry)] for entry in deduped]
        return list(deduped), positions


def get_esg_pipeline(store: SubmissionStore | None = None) -> EsgReportingPipeline:
    """
    Build the pipeline with env-driven settings and the configured store.
    """

    settings = get_engine_settings()
    return EsgReportingPipeline(
        store or build_submission_store(settings.store_backend),
        settings=settings,
    )
