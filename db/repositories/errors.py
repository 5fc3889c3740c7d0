"""
Repository-layer exceptions for submission storage flows.
"""

from __future__ import annotations


class SubmissionStoreError(Exception):
    """Base exception for submission store failures."""


class SubmissionStoreUnavailableError(SubmissionStoreError):
    """Raised when the stored submission set cannot be read."""


class SubmissionNotFoundError(SubmissionStoreError):
    """Raised when a source index does not address a stored submission."""


class SubmissionPersistenceError(SubmissionStoreError):
    """Raised when writing or deleting submissions fails."""
