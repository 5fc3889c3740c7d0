"""
tests/test_rollup_service.py

Pytest unit tests for RollupService.

Coverage
--------
- Per-category means formatted to two decimals
- All-or-nothing composite average
- Ascending year ordering
- Overall rollup over the full metric set
- Full-precision accumulation (formatting only at output time)
"""

from __future__ import annotations

import pytest

from app.domain.esg_metric import NO_DATA, NormalizedMetric, OverallAggregate, YearlyAggregate
from app.services.rollup_service import (
    RollupService,
    YearBucket,
    aggregate_by_year,
    aggregate_overall,
)


def _metric(category: str, value: float, year: int = 2024, index: int = 0) -> NormalizedMetric:
    return NormalizedMetric(
        category=category,
        metric=f"{category}_metric",
        value=value,
        year=year,
        source_index=index,
    )


@pytest.fixture()
def svc() -> RollupService:
    return RollupService()


class TestYearBucket:
    def test_empty_bucket_has_no_mean(self) -> None:
        assert YearBucket().mean() is None

    def test_mean_of_values(self) -> None:
        bucket = YearBucket()
        bucket.add(1.0)
        bucket.add(2.0)
        assert bucket.count == 2
        assert bucket.mean() == pytest.approx(1.5)


class TestAggregateByYear:
    def test_missing_category_blanks_composite(self, svc: RollupService) -> None:
        rollups = svc.aggregate_by_year(
            [_metric("environmental", 10), _metric("social", 20)]
        )

        assert rollups == [
            YearlyAggregate(
                year=2024,
                environmental="10.00",
                social="20.00",
                governance=NO_DATA,
                average=NO_DATA,
            )
        ]

    def test_correct_averaging(self, svc: RollupService) -> None:
        rollups = svc.aggregate_by_year(
            [
                _metric("environmental", 10),
                _metric("environmental", 20),
                _metric("social", 50),
                _metric("governance", 90),
            ]
        )

        row = rollups[0]
        assert row.environmental == "15.00"
        assert row.social == "50.00"
        assert row.governance == "90.00"
        assert row.average == "51.67"
        assert row.has_average

    def test_years_sorted_ascending(self, svc: RollupService) -> None:
        metrics = [
            _metric("social", 1, year=2025),
            _metric("social", 1, year=2021),
            _metric("social", 1, year=2023),
        ]
        assert [row.year for row in svc.aggregate_by_year(metrics)] == [2021, 2023, 2025]

    def test_years_are_independent(self, svc: RollupService) -> None:
        metrics = [
            _metric("environmental", 1, year=2023),
            _metric("social", 2, year=2023),
            _metric("governance", 3, year=2023),
            _metric("environmental", 4, year=2024),
        ]
        first, second = svc.aggregate_by_year(metrics)

        assert first.average == "2.00"
        assert second.environmental == "4.00"
        assert second.average == NO_DATA

    def test_composite_uses_unrounded_means(self, svc: RollupService) -> None:
        # Rounded means would be 0.01, 0.01, 0.00 -> 0.01; unrounded -> 0.004.
        rows = svc.aggregate_by_year(
            [
                _metric("environmental", 0.006),
                _metric("social", 0.006),
                _metric("governance", 0.0),
            ]
        )
        assert (rows[0].environmental, rows[0].social, rows[0].governance) == (
            "0.01",
            "0.01",
            "0.00",
        )
        assert rows[0].average == "0.00"

    def test_negative_zero_renders_as_zero(self, svc: RollupService) -> None:
        assert svc.aggregate_by_year([_metric("social", -0.0)])[0].social == "0.00"

    @pytest.mark.parametrize(
        ("values", "expected"),
        [
            ((10.25, 10.0), "10.13"),
            ((0.25, 0.0), "0.13"),
            ((-10.25, -10.0), "-10.13"),
            ((1.0, 1.75), "1.38"),
        ],
    )
    def test_exact_ties_round_half_up(
        self, svc: RollupService, values: tuple[float, float], expected: str
    ) -> None:
        metrics = [_metric("environmental", value) for value in values]
        assert svc.aggregate_by_year(metrics)[0].environmental == expected

    def test_composite_tie_rounds_half_up(self, svc: RollupService) -> None:
        # (1.0 + 1.0 + 1.375) / 3 == 1.125 exactly.
        row = svc.aggregate_by_year(
            [
                _metric("environmental", 1.0),
                _metric("social", 1.0),
                _metric("governance", 1.375),
            ]
        )[0]
        assert row.governance == "1.38"
        assert row.average == "1.13"

    def test_unknown_category_is_ignored(self, svc: RollupService) -> None:
        rows = svc.aggregate_by_year([_metric("finance", 99)])
        assert rows == [YearlyAggregate(year=2024)]

    def test_empty_input(self) -> None:
        assert aggregate_by_year([]) == []

    def test_to_dict_includes_year(self, svc: RollupService) -> None:
        row = svc.aggregate_by_year([_metric("social", 2)])[0]
        assert row.to_dict() == {
            "year": 2024,
            "environmental": NO_DATA,
            "social": "2.00",
            "governance": NO_DATA,
            "average": NO_DATA,
        }


class TestAggregateOverall:
    def test_overall_spans_all_years(self, svc: RollupService) -> None:
        overall = svc.aggregate_overall(
            [
                _metric("environmental", 10, year=2022),
                _metric("environmental", 30, year=2024),
                _metric("social", 60, year=2023),
                _metric("governance", 90, year=2024),
            ]
        )
        assert overall == OverallAggregate(
            environmental="20.00",
            social="60.00",
            governance="90.00",
            average="56.67",
        )

    def test_overall_all_or_nothing(self, svc: RollupService) -> None:
        overall = svc.aggregate_overall([_metric("environmental", 1), _metric("social", 2)])
        assert overall.governance == NO_DATA
        assert overall.average == NO_DATA
        assert not overall.has_average

    def test_empty_overall_is_all_sentinels(self) -> None:
        assert aggregate_overall([]) == OverallAggregate(
            environmental=NO_DATA, social=NO_DATA, governance=NO_DATA, average=NO_DATA
        )

    def test_accepts_generator(self) -> None:
        overall = aggregate_overall(_metric(c, 3) for c in ("environmental", "social", "governance"))
        assert overall.average == "3.00"


class TestAvailableYears:
    def test_distinct_years_most_recent_first(self, svc: RollupService) -> None:
        metrics = [_metric("social", 1, year=y) for y in (2022, 2024, 2022, 2023)]
        assert svc.available_years(metrics) == [2024, 2023, 2022]
