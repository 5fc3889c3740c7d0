"""
app/repositories package marker.
"""

from app.repositories.submission_store import (
    InMemorySubmissionStore,
    SubmissionStore,
    build_submission_store,
)

__all__ = [
    "InMemorySubmissionStore",
    "SubmissionStore",
    "build_submission_store",
]
