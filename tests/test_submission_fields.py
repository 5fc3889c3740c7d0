from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.validators.submission_fields import (
    parse_finite_float,
    parse_leading_int,
    parse_timestamp,
    timestamp_millis,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2022", 2022),
        (" 2022 ", 2022),
        ("2022-23", 2022),
        (2021, 2021),
        (2020.9, 2020),
        ("FY2022", None),
        ("", None),
        (None, None),
        (True, None),
        (float("nan"), None),
    ],
)
def test_parse_leading_int(value: object, expected: int | None) -> None:
    assert parse_leading_int(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("12.5", 12.5),
        ("  -3", -3.0),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("12.5 tCO2e", 12.5),
        (7, 7.0),
        ("abc", None),
        ("", None),
        ("Infinity", None),
        (float("inf"), None),
        (False, None),
        (None, None),
    ],
)
def test_parse_finite_float(value: object, expected: float | None) -> None:
    assert parse_finite_float(value) == expected


def test_parse_timestamp_handles_zulu_suffix() -> None:
    assert parse_timestamp("2023-05-01T10:00:00Z") == datetime(
        2023, 5, 1, 10, 0, tzinfo=timezone.utc
    )


def test_parse_timestamp_known_formats_are_utc() -> None:
    parsed = parse_timestamp("05/01/2023")
    assert parsed == datetime(2023, 5, 1, tzinfo=timezone.utc)


def test_parse_timestamp_epoch_millis() -> None:
    assert parse_timestamp(86_400_000) == datetime(1970, 1, 2, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", ["garbage", "", None, True, float("nan")])
def test_parse_timestamp_failures_return_none(value: object) -> None:
    assert parse_timestamp(value) is None


def test_timestamp_millis_defaults_to_zero() -> None:
    assert timestamp_millis(None) == 0
    assert timestamp_millis("garbage") == 0
    assert timestamp_millis("1970-01-01T00:00:01.500Z") == 1500
