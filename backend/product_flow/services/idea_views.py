"""Filtered, sorted, and grouped views over one product's ideas.

These functions are the single source of truth for idea ordering and
grouping: the list endpoint, the funnel endpoint, and the MCP ``list_ideas``
tool all go through them. They are pure, never mutate their input, and every
sort is stable (ties keep input order).
"""

from __future__ import annotations

import unicodedata
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, List, Sequence, Union

from ..constants import STATUS_RANK, UNRANKED_STATUS
from ..schemas.idea_schema import Idea, ValidationStatus


class SortField(str, Enum):
    NAME = "name"
    VALIDATION_STATUS = "validationStatus"
    AGE = "age"
    AGE_OLDEST = "ageOldest"
    UPVOTES = "upvotes"
    IDEA_NUMBER = "ideaNumber"


class FilterField(str, Enum):
    ALL = "all"
    BACKLOG = "backlog"
    FIRST_LEVEL = "firstLevel"
    SECOND_LEVEL = "secondLevel"
    SCALING = "scaling"
    FAILED = "failed"


# ── Keys ─────────────────────────────────────────────────────────────────

def _name_key(idea: Idea) -> str:
    # Accent- and case-insensitive, so "émile" sorts with "Emile"
    decomposed = unicodedata.normalize("NFKD", idea.name or "")
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _status_rank(idea: Idea) -> int:
    status = idea.validation_status
    if status is None:
        return UNRANKED_STATUS
    return STATUS_RANK.get(status.value, UNRANKED_STATUS)


def _created(idea: Idea) -> datetime:
    created = idea.created_at
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


def _by_age(ideas: Sequence[Idea], newest_first: bool) -> List[Idea]:
    # Records without a creation time go last in either direction
    dated = sorted((i for i in ideas if i.created_at is not None), key=_created, reverse=newest_first)
    return dated + [i for i in ideas if i.created_at is None]


_SORTERS: Dict[SortField, Callable[[Sequence[Idea]], List[Idea]]] = {
    SortField.NAME: lambda ideas: sorted(ideas, key=_name_key),
    SortField.VALIDATION_STATUS: lambda ideas: sorted(ideas, key=_status_rank),
    SortField.AGE: lambda ideas: _by_age(ideas, newest_first=True),
    SortField.AGE_OLDEST: lambda ideas: _by_age(ideas, newest_first=False),
    SortField.UPVOTES: lambda ideas: sorted(ideas, key=lambda i: i.upvotes or 0, reverse=True),
    SortField.IDEA_NUMBER: lambda ideas: sorted(ideas, key=lambda i: i.idea_number, reverse=True),
}


# ── Public API ───────────────────────────────────────────────────────────

def filter_ideas(ideas: Iterable[Idea], filter_by: Union[FilterField, str]) -> List[Idea]:
    """Keep ideas whose status matches exactly; ``all`` keeps everything."""
    filter_by = FilterField(filter_by)
    if filter_by is FilterField.ALL:
        return list(ideas)
    return [
        idea for idea in ideas
        if idea.validation_status is not None and idea.validation_status.value == filter_by.value
    ]


def sort_ideas(ideas: Iterable[Idea], sort_by: Union[SortField, str]) -> List[Idea]:
    """Return a new, stably sorted list.

    Upvote order among equal counts follows input order, so it is only as
    deterministic as the store's own ordering.
    """
    return _SORTERS[SortField(sort_by)](list(ideas))


def group_by_validation_status(ideas: Iterable[Idea]) -> Dict[str, List[Idea]]:
    """Partition into the five funnel buckets, in funnel order.

    Ideas with a missing or unrecognised status land in no bucket.
    """
    groups: Dict[str, List[Idea]] = {status.value: [] for status in ValidationStatus.known()}
    for idea in ideas:
        status = idea.validation_status
        if status is not None and status.value in groups:
            groups[status.value].append(idea)
    return groups


def funnel_counts(groups: Dict[str, List[Idea]]) -> Dict[str, int]:
    return {status: len(bucket) for status, bucket in groups.items()}


def compose_list_view(
    ideas: Iterable[Idea],
    sort_by: Union[SortField, str],
    filter_by: Union[FilterField, str],
) -> List[Idea]:
    """Filter, then sort — the list view's exact pipeline."""
    return sort_ideas(filter_ideas(ideas, filter_by), sort_by)
