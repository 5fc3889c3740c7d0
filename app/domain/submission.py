"""
app/domain/submission.py

Decoding of stored ESG submissions into an explicit tagged union.

Two incompatible record shapes have been written by data-entry forms and
IoT ingestion over time, and both remain valid indefinitely:

``flat``
    one metric per submission::

        {"category": "Environmental", "metric": "scope1Emissions", "value": "12.5"}

``nested``
    up to three category sections per submission, each a map of metric
    name to numeric-like value::

        {"environmental": {"scope1Emissions": 12.5, "description": "..."},
         "social": {"employeeCount": "240"}}

The shape is decided once, here, by :func:`decode_submission`. A submission
carrying any non-null category section is nested; everything else is flat.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from app.domain.esg_metric import ESG_CATEGORIES
from app.validators.submission_fields import parse_timestamp


@dataclass(frozen=True)
class SubmissionIdentity:
    """
    Descriptive fields shared by every metric expanded from one submission.
    """

    company_name: str | None = None
    sector: str | None = None
    region: str | None = None
    status: str | None = None
    timestamp: str | None = None


@dataclass(frozen=True)
class FlatSubmission:
    identity: SubmissionIdentity
    category: str
    metric: str
    value: Any
    kind: Literal["flat"] = "flat"


@dataclass(frozen=True)
class NestedSubmission:
    identity: SubmissionIdentity
    sections: dict[str, Mapping[str, Any]] = field(default_factory=dict)
    kind: Literal["nested"] = "nested"


SubmissionShape = FlatSubmission | NestedSubmission


def is_nested(raw: Mapping[str, Any]) -> bool:
    return any(raw.get(category) is not None for category in ESG_CATEGORIES)


def decode_submission(raw: Mapping[str, Any]) -> SubmissionShape:
    """
    Decode one stored submission into its shape variant.
    """

    if is_nested(raw):
        return decode_nested(raw)
    return decode_flat(raw)


def decode_flat(raw: Mapping[str, Any]) -> FlatSubmission:
    return FlatSubmission(
        identity=decode_identity(raw),
        category=str(raw.get("category") or "").lower(),
        metric=str(raw.get("metric") or ""),
        value=raw.get("value"),
    )


def decode_nested(raw: Mapping[str, Any]) -> NestedSubmission:
    sections: dict[str, Mapping[str, Any]] = {}
    for category in ESG_CATEGORIES:
        section = raw.get(category)
        # Legacy rows sometimes hold a scalar here; it carries no metrics.
        if isinstance(section, Mapping):
            sections[category] = section
    return NestedSubmission(identity=decode_identity(raw), sections=sections)


def decode_identity(raw: Mapping[str, Any]) -> SubmissionIdentity:
    return SubmissionIdentity(
        company_name=_optional_text(raw.get("companyName")),
        sector=_optional_text(raw.get("sector")),
        region=_optional_text(raw.get("region")),
        status=_optional_text(raw.get("status")),
        timestamp=_timestamp_text(raw.get("timestamp")),
    )


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _timestamp_text(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    parsed = parse_timestamp(value)
    return parsed.isoformat() if parsed is not None else None
