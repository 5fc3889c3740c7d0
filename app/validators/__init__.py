"""
app/validators package marker.
"""

from app.validators.submission_fields import (
    parse_finite_float,
    parse_leading_int,
    parse_timestamp,
    timestamp_millis,
)

__all__ = [
    "parse_finite_float",
    "parse_leading_int",
    "parse_timestamp",
    "timestamp_millis",
]
