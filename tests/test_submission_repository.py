"""
tests/test_submission_repository.py

SqlSubmissionStore against an in-memory SQLite database.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from app.config import EngineSettings
from app.domain.clock import FixedClock
from app.services.esg_pipeline import EsgReportingPipeline
from db.base import Base
from db.repositories.errors import (
    SubmissionNotFoundError,
    SubmissionStoreError,
    SubmissionStoreUnavailableError,
)
from db.repositories.submission_repository import SqlSubmissionStore
from db.session import build_session_factory


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def store(engine: Engine) -> SqlSubmissionStore:
    return SqlSubmissionStore(session_factory=build_session_factory(engine))


class TestSqlSubmissionStore:
    def test_empty_store_lists_nothing(self, store: SqlSubmissionStore) -> None:
        assert store.list_submissions() == []

    def test_payloads_round_trip_in_insertion_order(self, store: SqlSubmissionStore) -> None:
        nested = {"companyName": "Acme", "environmental": {"water": "12.5", "description": "x"}}
        flat = {"category": "Social", "metric": "headcount", "value": 40}

        store.add_submission(nested)
        store.add_submission(flat)

        assert store.list_submissions() == [nested, flat]

    def test_listed_payloads_are_copies(self, store: SqlSubmissionStore) -> None:
        store.add_submission({"environmental": {"water": 1}})
        listed = store.list_submissions()
        listed[0]["environmental"]["water"] = 999

        assert store.list_submissions()[0]["environmental"]["water"] == 1

    def test_delete_by_listing_index(self, store: SqlSubmissionStore) -> None:
        for name in ("a", "b", "c"):
            store.add_submission({"metric": name})

        store.delete_submission(1)

        assert [e["metric"] for e in store.list_submissions()] == ["a", "c"]

    @pytest.mark.parametrize("index", [-1, 3])
    def test_delete_out_of_range(self, store: SqlSubmissionStore, index: int) -> None:
        for name in ("a", "b", "c"):
            store.add_submission({"metric": name})

        with pytest.raises(SubmissionNotFoundError):
            store.delete_submission(index)
        assert len(store.list_submissions()) == 3

    def test_replace_overwrites_in_order(self, store: SqlSubmissionStore) -> None:
        store.add_submission({"metric": "old"})

        store.replace_submissions([{"metric": "x"}, {"metric": "y"}])

        assert [e["metric"] for e in store.list_submissions()] == ["x", "y"]

    def test_add_after_replace_appends(self, store: SqlSubmissionStore) -> None:
        store.replace_submissions([{"metric": "x"}])
        store.add_submission({"metric": "y"})
        assert [e["metric"] for e in store.list_submissions()] == ["x", "y"]

    def test_missing_table_surfaces_as_store_error(self) -> None:
        bare = create_engine(
            "sqlite+pysqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        store = SqlSubmissionStore(session_factory=build_session_factory(bare))

        with pytest.raises(SubmissionStoreUnavailableError):
            store.list_submissions()
        with pytest.raises(SubmissionStoreError):
            store.replace_submissions([{"metric": "x"}])


class TestPipelineOverSqlStore:
    def test_pipeline_reads_sql_snapshot(self, store: SqlSubmissionStore) -> None:
        store.add_submission(
            {
                "companyName": "Acme",
                "reportingYear": 2023,
                "environmental": {"water": 10},
                "social": {"headcount": 20},
                "governance": {"boardSize": 30},
            }
        )
        settings = EngineSettings(
            default_status="Submitted",
            store_backend="database",
            recompute_interval_minutes=15,
            scheduler_enabled=False,
            log_level="INFO",
        )

        result = EsgReportingPipeline(
            store, clock=FixedClock.for_year(2030), settings=settings
        ).run()

        assert result.yearly[0].year == 2023
        assert result.yearly[0].average == "20.00"

    def test_pipeline_degrades_to_empty_when_table_missing(self) -> None:
        bare = create_engine(
            "sqlite+pysqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        store = SqlSubmissionStore(session_factory=build_session_factory(bare))
        settings = EngineSettings(
            default_status="Submitted",
            store_backend="database",
            recompute_interval_minutes=15,
            scheduler_enabled=False,
            log_level="INFO",
        )

        result = EsgReportingPipeline(
            store, clock=FixedClock.for_year(2030), settings=settings
        ).run()

        assert result.is_empty
        assert result.overall.average == "-"
