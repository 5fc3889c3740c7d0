"""
app/services/deduplication_service.py

Latest-write-wins deduplication of stored ESG submissions.

Natural key
-----------
A submission's ``id`` when it has one, otherwise the composite::

    companyName | lower(category) | metric | year-or-reportingYear | String(value)

Only top-level fields take part in the key, so nested submissions are
deduplicated whole rather than per metric.

Conflict resolution
-------------------
Among entries sharing a key, the one with the greatest effective timestamp
(``timestamp``, then ``createdAt``, then epoch 0) is kept. On an exact tie
the later entry in iteration order wins. Output order is the order in which
keys were first seen.
"""

from __future__ import annotations

import logging
import math
from collections import OrderedDict
from collections.abc import Mapping, Sequence
from typing import Any

from app.validators.submission_fields import timestamp_millis

logger = logging.getLogger(__name__)

RawSubmission = Mapping[str, Any]

_MISSING = object()


def natural_key(entry: RawSubmission) -> str:
    """
    Return the identity under which *entry* is deduplicated.
    """

    submission_id = entry.get("id")
    if submission_id:
        return str(submission_id)

    return "|".join(
        (
            _text(entry.get("companyName")),
            _text(entry.get("category")).lower(),
            _text(entry.get("metric")),
            _year_text(entry.get("year") or entry.get("reportingYear")),
            _value_text(entry.get("value", _MISSING)),
        )
    )


def effective_timestamp(entry: RawSubmission) -> int:
    """
    Epoch milliseconds used to pick the winner among duplicates.
    """

    return timestamp_millis(entry.get("timestamp") or entry.get("createdAt") or None)


class DeduplicationService:
    """
    Stateless collapse of duplicate submissions onto their latest write.
    """

    def dedupe(self, entries: Sequence[RawSubmission]) -> list[RawSubmission]:
        winners: OrderedDict[str, RawSubmission] = OrderedDict()
        winner_times: dict[str, int] = {}

        for entry in entries:
            key = natural_key(entry)
            entry_time = effective_timestamp(entry)
            if key not in winners:
                winners[key] = entry
                winner_times[key] = entry_time
            elif entry_time >= winner_times[key]:
                # Replacing keeps the key's original slot in the ordering.
                winners[key] = entry
                winner_times[key] = entry_time

        deduped = list(winners.values())
        logger.debug(
            "dedupe kept %d of %d submissions", len(deduped), len(entries)
        )
        return deduped


def dedupe(entries: Sequence[RawSubmission]) -> list[RawSubmission]:
    return DeduplicationService().dedupe(entries)


def _text(value: Any) -> str:
    if not value:
        return ""
    return str(value)


def _year_text(value: Any) -> str:
    if not value:
        return ""
    return _value_text(value)


def _value_text(value: Any) -> str:
    """
    Render *value* the way stored keys were historically built, so that
    ``12`` and ``12.0`` collide and a missing value reads ``undefined``.
    """

    if value is _MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)
