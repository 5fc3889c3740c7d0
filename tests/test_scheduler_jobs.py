"""
tests/test_scheduler_jobs.py

Periodic recompute job registration and last-run-wins publishing.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone

import pytest

from app.config import EngineSettings
from app.domain.clock import FixedClock
from app.repositories.submission_store import InMemorySubmissionStore
from app.scheduler import jobs
from app.services.esg_pipeline import EsgReportingPipeline


def _settings(*, enabled: bool = True, interval: int = 5) -> EngineSettings:
    return EngineSettings(
        default_status="Submitted",
        store_backend="memory",
        recompute_interval_minutes=interval,
        scheduler_enabled=enabled,
        log_level="INFO",
    )


def _pipeline(year: int, entries: list[dict] | None = None) -> EsgReportingPipeline:
    return EsgReportingPipeline(
        InMemorySubmissionStore(entries or []),
        clock=FixedClock(datetime(year, 1, 1, tzinfo=timezone.utc)),
        settings=_settings(),
    )


@pytest.fixture(autouse=True)
def _clean_latest() -> Iterator[None]:
    jobs.reset_latest_result()
    yield
    jobs.reset_latest_result()


class TestBuildScheduler:
    def test_registers_interval_job(self) -> None:
        scheduler = jobs.build_scheduler(_pipeline(2030), _settings(interval=5))

        job = scheduler.get_job(jobs.JOB_ID)

        assert job is not None
        assert job.trigger.interval.total_seconds() == 300
        assert not scheduler.running

    def test_disabled_scheduler_has_no_jobs(self) -> None:
        scheduler = jobs.build_scheduler(_pipeline(2030), _settings(enabled=False))
        assert scheduler.get_jobs() == []


class TestRunRollupRecompute:
    def test_publishes_result(self) -> None:
        entries = [{"category": "social", "metric": "m", "value": 4, "reportingYear": 2029}]

        result = jobs.run_rollup_recompute(_pipeline(2030, entries))

        assert jobs.get_latest_result() is result
        assert result.overall.social == "4.00"

    def test_older_run_does_not_replace_newer(self) -> None:
        newer = jobs.run_rollup_recompute(_pipeline(2031))
        jobs.run_rollup_recompute(_pipeline(2030))

        assert jobs.get_latest_result() is newer
