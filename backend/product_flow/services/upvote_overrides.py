"""Optimistic upvote counts with rollback.

Per idea row:

    STABLE(n) --click--> PENDING(n + 1) --ok--> STABLE(n + 1)
                                        --error--> STABLE(n)

The displayed count moves as soon as the user clicks; the write
(``upvote_idea(store, id, n)``) runs afterwards. A failed write puts the
pre-click count back and reports the failure; nothing is retried. A write
that settles after a newer click on the same row leaves that click's count
in place.

Overrides live for one client session only. ``reconcile`` drops them when
fresh server data arrives so a reload always shows the stored count.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Set

from ..exceptions import ProductFlowError
from ..schemas.idea_schema import Idea
from .idea_service import upvote_idea
from .record_store import RecordStore

logger = logging.getLogger(__name__)

UpvoteWriter = Callable[[RecordStore, str, int], Awaitable[Idea]]


class UpvoteState(str, Enum):
    STABLE = "stable"
    PENDING = "pending"


@dataclass
class RowState:
    count: int
    state: UpvoteState = UpvoteState.STABLE


@dataclass
class UpvoteOutcome:
    idea_id: str
    ok: bool
    displayed: int
    error: Optional[str] = None


class UpvoteOverrides:
    """Local upvote overrides merged over server-provided ideas."""

    def __init__(self, store: RecordStore, writer: UpvoteWriter = upvote_idea):
        self.store = store
        self._writer = writer
        self._rows: Dict[str, RowState] = {}
        self._tasks: Set[asyncio.Task] = set()
        self.last_error: Optional[str] = None

    def displayed(self, idea: Idea) -> int:
        row = self._rows.get(idea.id)
        return row.count if row is not None else (idea.upvotes or 0)

    def state(self, idea_id: str) -> UpvoteState:
        row = self._rows.get(idea_id)
        return row.state if row is not None else UpvoteState.STABLE

    def apply(self, ideas: Iterable[Idea]) -> List[Idea]:
        """Return copies of *ideas* carrying the displayed counts."""
        merged = []
        for idea in ideas:
            row = self._rows.get(idea.id)
            merged.append(idea if row is None else idea.model_copy(update={"upvotes": row.count}))
        return merged

    def dismiss_error(self) -> None:
        self.last_error = None

    def _begin(self, idea: Idea) -> int:
        observed = self.displayed(idea)
        self._rows[idea.id] = RowState(observed + 1, UpvoteState.PENDING)
        return observed

    def _settle(self, idea_id: str, observed: int, count: int) -> int:
        # A later click on the same row owns it now; leave its count alone
        row = self._rows.get(idea_id)
        if row is None or row.count == observed + 1:
            self._rows[idea_id] = RowState(count)
        return self._rows[idea_id].count

    async def _commit(self, idea_id: str, observed: int) -> UpvoteOutcome:
        try:
            await self._writer(self.store, idea_id, observed)
        except ProductFlowError as exc:
            displayed = self._settle(idea_id, observed, observed)
            self.last_error = f"Failed to update upvotes: {exc}"
            logger.warning("Upvote for idea %s rolled back to %d: %s", idea_id, observed, exc)
            return UpvoteOutcome(idea_id, ok=False, displayed=displayed, error=self.last_error)
        except BaseException:
            self._settle(idea_id, observed, observed)
            raise

        return UpvoteOutcome(idea_id, ok=True, displayed=self._settle(idea_id, observed, observed + 1))

    async def upvote(self, idea: Idea) -> UpvoteOutcome:
        """Optimistically bump the count, then write it."""
        return await self._commit(idea.id, self._begin(idea))

    def schedule(self, idea: Idea) -> asyncio.Task:
        """Write in the background; the displayed count moves before this returns."""
        task = asyncio.ensure_future(self._commit(idea.id, self._begin(idea)))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def reconcile(self, ideas: Iterable[Idea]) -> None:
        """Drop settled overrides for ideas the server just returned."""
        for idea in ideas:
            row = self._rows.get(idea.id)
            if row is not None and row.state is UpvoteState.STABLE:
                del self._rows[idea.id]
