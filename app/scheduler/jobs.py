"""
app/scheduler/jobs.py

APScheduler-based periodic recomputation of ESG rollups.

Triggers
--------
Rollups are recomputed from the full stored submission set whenever one of
these fires:

  - the ``esg_rollup_recompute`` interval job built here
  - an explicit caller action (:func:`run_rollup_recompute`)
  - a storage-change notification forwarded to :func:`run_rollup_recompute`

Runs are independent full recomputations. The most recently *computed*
result is kept; an older run finishing late never replaces a newer one.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on process boot; shut it down gracefully on exit.
"""

from __future__ import annotations

import logging
import threading

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import EngineSettings, get_engine_settings
from app.services.esg_pipeline import EsgReportingPipeline, PipelineResult, get_esg_pipeline

logger = logging.getLogger(__name__)

JOB_ID = "esg_rollup_recompute"

_latest_lock = threading.Lock()
_latest_result: PipelineResult | None = None


def get_latest_result() -> PipelineResult | None:
    """Most recent completed run, or ``None`` before the first run."""
    with _latest_lock:
        return _latest_result


def _publish(result: PipelineResult) -> bool:
    global _latest_result
    with _latest_lock:
        if _latest_result is not None and result.computed_at < _latest_result.computed_at:
            return False
        _latest_result = result
        return True


def reset_latest_result() -> None:
    global _latest_result
    with _latest_lock:
        _latest_result = None


# ---------------------------------------------------------------------------
# Job: rollup recomputation
# ---------------------------------------------------------------------------


def run_rollup_recompute(pipeline: EsgReportingPipeline | None = None) -> PipelineResult:
    """
    Recompute metrics and rollups and publish the result.
    """

    logger.info("Scheduler: esg_rollup_recompute starting")
    result = (pipeline or get_esg_pipeline()).run()

    if _publish(result):
        logger.info(
            "Scheduler: esg_rollup_recompute complete metrics=%d years=%s overall=%s",
            len(result.metrics),
            result.available_years,
            result.overall.average,
        )
    else:
        logger.info("Scheduler: esg_rollup_recompute superseded by a newer run")
    return result


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler(
    pipeline: EsgReportingPipeline | None = None,
    settings: EngineSettings | None = None,
) -> BackgroundScheduler:
    """
    Build and register the periodic recompute job.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    No job is registered when ``ESG_SCHEDULER_ENABLED`` is false.
    """

    resolved = settings or get_engine_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    if not resolved.scheduler_enabled:
        logger.warning("Scheduler: disabled via ESG_SCHEDULER_ENABLED, no jobs registered")
        return scheduler

    scheduler.add_job(
        run_rollup_recompute,
        trigger="interval",
        minutes=resolved.recompute_interval_minutes,
        kwargs={"pipeline": pipeline},
        id=JOB_ID,
        name="ESG rollup recomputation",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
        misfire_grace_time=600,
    )
    return scheduler
