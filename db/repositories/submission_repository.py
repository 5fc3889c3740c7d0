"""
SQLAlchemy-backed submission store.

Submissions are opaque JSON payloads ordered by ``position``. Every public
method opens its own session from the injected factory and commits or rolls
back before returning, so callers always observe a consistent snapshot.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from db.models.submission_record import SubmissionRecord
from db.repositories.errors import (
    SubmissionNotFoundError,
    SubmissionPersistenceError,
    SubmissionStoreUnavailableError,
)

logger = logging.getLogger(__name__)


class SqlSubmissionStore:
    """
    Persistence collaborator backed by the ``esg_submissions`` table.
    """

    def __init__(self, *, session_factory: sessionmaker[Session] | None = None) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory

    def list_submissions(self) -> list[dict[str, Any]]:
        stmt = select(SubmissionRecord.payload).order_by(
            SubmissionRecord.position.asc(),
            SubmissionRecord.created_at.asc(),
        )
        try:
            with self._session_factory() as session:
                payloads = session.scalars(stmt).all()
        except SQLAlchemyError as exc:
            raise SubmissionStoreUnavailableError("Failed to list stored submissions.") from exc

        return [copy.deepcopy(dict(payload)) for payload in payloads]

    def add_submission(self, payload: Mapping[str, Any]) -> None:
        try:
            with self._session_factory() as session:
                with session.begin():
                    next_position = session.scalar(
                        select(func.coalesce(func.max(SubmissionRecord.position), -1) + 1)
                    )
                    session.add(
                        SubmissionRecord(position=next_position, payload=dict(payload))
                    )
        except SQLAlchemyError as exc:
            raise SubmissionPersistenceError("Failed to store submission.") from exc

    def delete_submission(self, source_index: int) -> None:
        """
        Delete the submission at *source_index* in :meth:`list_submissions` order.
        """

        stmt = select(SubmissionRecord.id).order_by(
            SubmissionRecord.position.asc(),
            SubmissionRecord.created_at.asc(),
        )
        try:
            with self._session_factory() as session:
                with session.begin():
                    ids = session.scalars(stmt).all()
                    if source_index < 0 or source_index >= len(ids):
                        raise SubmissionNotFoundError(
                            f"No stored submission at index {source_index}."
                        )
                    session.execute(
                        delete(SubmissionRecord).where(
                            SubmissionRecord.id == ids[source_index]
                        )
                    )
        except SQLAlchemyError as exc:
            raise SubmissionPersistenceError(
                f"Failed to delete submission at index {source_index}."
            ) from exc

        logger.info("Deleted stored submission index=%d", source_index)

    def replace_submissions(self, entries: Sequence[Mapping[str, Any]]) -> None:
        """
        Atomically overwrite the stored set with *entries*, in order.
        """

        try:
            with self._session_factory() as session:
                with session.begin():
                    session.execute(delete(SubmissionRecord))
                    session.add_all(
                        SubmissionRecord(position=position, payload=dict(entry))
                        for position, entry in enumerate(entries)
                    )
        except SQLAlchemyError as exc:
            raise SubmissionPersistenceError("Failed to replace stored submissions.") from exc

        logger.info("Replaced stored submission set count=%d", len(entries))
