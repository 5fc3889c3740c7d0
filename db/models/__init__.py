"""
Model package exports.

Import all SQLAlchemy models here so metadata registration works without
extra imports.
"""

from db.models.submission_record import SubmissionRecord

__all__ = [
    "SubmissionRecord",
]
