"""Pure helpers for the idea model — no I/O.

Status history entries are persisted as serialized JSON strings inside a list
column, so reading them back has to tolerate anything a past writer (or a
hand edit) left behind.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..schemas.idea_schema import HistoryEntry, Idea, ValidationStatus

logger = logging.getLogger(__name__)


def serialize_history_entry(
    status: ValidationStatus | str,
    timestamp: Optional[datetime] = None,
    notes: Optional[str] = None,
) -> str:
    """Serialize one ``{status, timestamp, notes?}`` entry for storage."""
    timestamp = timestamp or datetime.now(timezone.utc)
    entry = {
        "status": ValidationStatus(status).value,
        "timestamp": timestamp.isoformat(),
    }
    if notes:
        entry["notes"] = notes
    return json.dumps(entry)


def _parse_entry(raw: Any) -> Optional[HistoryEntry]:
    try:
        data = json.loads(raw) if isinstance(raw, str) else raw
        if not isinstance(data, dict):
            return None
        entry = HistoryEntry.model_validate(data)
    except (ValueError, TypeError, RecursionError, PydanticValidationError):
        return None
    if entry.timestamp.tzinfo is None:
        entry.timestamp = entry.timestamp.replace(tzinfo=timezone.utc)
    return entry


def parse_status_history(raw_entries: Optional[Iterable[Any]]) -> List[HistoryEntry]:
    """Deserialize stored history entries, newest first.

    Malformed entries are dropped silently; this never raises.
    """
    if not raw_entries:
        return []

    entries = []
    for raw in raw_entries:
        entry = _parse_entry(raw)
        if entry is None:
            logger.debug("Dropping malformed status history entry: %r", raw)
            continue
        entries.append(entry)

    entries.sort(key=lambda entry: entry.timestamp, reverse=True)
    return entries


def next_idea_number(ideas_in_scope: Iterable[Idea]) -> int:
    """Return the number for the next idea in one (portfolio, product) scope.

    Always ``max + 1``; gaps left by deleted ideas are never reused.
    """
    numbers = [idea.idea_number for idea in ideas_in_scope]
    if not numbers:
        return 1
    return max(numbers) + 1
