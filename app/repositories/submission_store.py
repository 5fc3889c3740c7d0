"""
app/repositories/submission_store.py

Persistence collaborator contract for raw ESG submissions.

The reporting pipeline only ever reads a full snapshot and deletes or
replaces by position; it never depends on how submissions are stored.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol

from db.repositories.errors import SubmissionNotFoundError


class SubmissionStore(Protocol):
    def list_submissions(self) -> list[dict[str, Any]]:
        ...

    def delete_submission(self, source_index: int) -> None:
        ...

    def replace_submissions(self, entries: Sequence[Mapping[str, Any]]) -> None:
        ...


class InMemorySubmissionStore:
    """
    List-backed store. Reads and writes copy payloads so callers can never
    mutate stored state through a returned reference.
    """

    def __init__(self, entries: Iterable[Mapping[str, Any]] = ()) -> None:
        self._entries: list[dict[str, Any]] = [copy.deepcopy(dict(entry)) for entry in entries]

    def list_submissions(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._entries)

    def add_submission(self, payload: Mapping[str, Any]) -> None:
        self._entries.append(copy.deepcopy(dict(payload)))

    def delete_submission(self, source_index: int) -> None:
        if source_index < 0 or source_index >= len(self._entries):
            raise SubmissionNotFoundError(f"No stored submission at index {source_index}.")
        del self._entries[source_index]

    def replace_submissions(self, entries: Sequence[Mapping[str, Any]]) -> None:
        self._entries = [copy.deepcopy(dict(entry)) for entry in entries]


def build_submission_store(backend: str) -> SubmissionStore:
    """
    Resolve the configured store backend (``memory`` or ``database``).
    """

    if backend == "memory":
        return InMemorySubmissionStore()
    if backend == "database":
        from db.repositories.submission_repository import SqlSubmissionStore

        return SqlSubmissionStore()
    raise ValueError(f"Unknown submission store backend: {backend!r}")
