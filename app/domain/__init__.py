"""
app/domain package marker.
"""

from app.domain.clock import Clock, FixedClock, SystemClock
from app.domain.esg_metric import (
    ESG_CATEGORIES,
    NO_DATA,
    EsgCategory,
    NormalizedMetric,
    OverallAggregate,
    YearlyAggregate,
)
from app.domain.submission import (
    FlatSubmission,
    NestedSubmission,
    SubmissionIdentity,
    decode_submission,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "ESG_CATEGORIES",
    "NO_DATA",
    "EsgCategory",
    "NormalizedMetric",
    "OverallAggregate",
    "YearlyAggregate",
    "FlatSubmission",
    "NestedSubmission",
    "SubmissionIdentity",
    "decode_submission",
]
