"""
Repository layer exports.
"""

from db.repositories.errors import (
    SubmissionNotFoundError,
    SubmissionPersistenceError,
    SubmissionStoreError,
    SubmissionStoreUnavailableError,
)
from db.repositories.submission_repository import SqlSubmissionStore

__all__ = [
    "SqlSubmissionStore",
    "SubmissionStoreError",
    "SubmissionStoreUnavailableError",
    "SubmissionNotFoundError",
    "SubmissionPersistenceError",
]
