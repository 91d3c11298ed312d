"""Idea lifecycle engine — create, update, upvote, and scoped reads.

Invariants kept here:
  - ``idea_number`` is ``max + 1`` over the exact (portfolio, product) scope.
  - ``status_history`` grows by one entry per *distinct* status change.
  - ``upvotes`` only moves through ``upvote_idea``.

Known races (no conditional writes in the store):
  - Two concurrent creates in one product can read the same max and assign
    the same ``idea_number``.
  - ``upvote_idea`` writes ``observed + 1``; two clients that observed the
    same count both write the same value and one vote is lost.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..constants import DEFAULT_VALIDATION_STATUS
from ..exceptions import NotFoundError, ValidationError
from ..schemas.idea_schema import Idea, IdeaCreate, IdeaUpdate, ValidationStatus
from .idea_domain import next_idea_number, serialize_history_entry
from .record_store import RecordStore

logger = logging.getLogger(__name__)

TABLE = "Idea"


def _check_required(fields: Dict[str, Optional[str]]) -> Dict[str, str]:
    """Trim each field; report every empty one at once."""
    errors: Dict[str, str] = {}
    trimmed: Dict[str, str] = {}
    for field, value in fields.items():
        value = (value or "").strip()
        if not value:
            errors[field] = f"{field.capitalize()} is required"
        trimmed[field] = value
    if errors:
        raise ValidationError(errors)
    return trimmed


# ── Reads ────────────────────────────────────────────────────────────────

async def list_ideas(store: RecordStore, portfolio_code: str, product_code: str) -> List[Idea]:
    """All ideas in one (portfolio, product) scope, in store order.

    Uses the product-code index, then narrows to the portfolio in memory:
    product codes are only unique within a portfolio.
    """
    records = await store.list_by_index(TABLE, "product_code", product_code)
    return [Idea.model_validate(r) for r in records if r.get("portfolio_code") == portfolio_code]


async def get_idea(store: RecordStore, idea_id: str) -> Idea:
    record = await store.get(TABLE, idea_id)
    if record is None:
        raise NotFoundError("Idea", idea_id)
    return Idea.model_validate(record)


async def get_idea_by_number(
    store: RecordStore,
    portfolio_code: str,
    product_code: str,
    idea_number: int,
) -> Idea:
    """Resolve ``#idea_number`` within a product.

    Duplicate numbers (see module docstring) resolve to the earliest-created
    match and are logged.
    """
    matches = [
        idea
        for idea in await list_ideas(store, portfolio_code, product_code)
        if idea.idea_number == idea_number
    ]
    if not matches:
        raise NotFoundError(
            "Idea",
            idea_number,
            f"Idea #{idea_number} not found in {portfolio_code}/{product_code}",
        )
    if len(matches) > 1:
        logger.warning(
            "Duplicate idea number #%s in %s/%s (%d records); using earliest",
            idea_number, portfolio_code, product_code, len(matches),
        )
        matches.sort(key=lambda idea: idea.created_at or datetime.max.replace(tzinfo=timezone.utc))
    return matches[0]


# ── Mutations ────────────────────────────────────────────────────────────

async def create_idea(store: RecordStore, payload: IdeaCreate) -> Idea:
    """Validate, number, seed history, and persist a new idea."""
    fields = _check_required({"name": payload.name, "hypothesis": payload.hypothesis})

    in_scope = await list_ideas(store, payload.portfolio_code, payload.product_code)
    idea_number = next_idea_number(in_scope)

    status = payload.validation_status or ValidationStatus(DEFAULT_VALIDATION_STATUS)
    record = await store.create(TABLE, {
        "portfolio_code": payload.portfolio_code,
        "product_code": payload.product_code,
        "idea_number": idea_number,
        "name": fields["name"],
        "hypothesis": fields["hypothesis"],
        "validation_status": status.value,
        "status_history": [serialize_history_entry(status)],
        "upvotes": 0,
        "source": payload.source.value if payload.source else None,
    })

    logger.info(
        "Created idea #%s in %s/%s (%s)",
        idea_number, payload.portfolio_code, payload.product_code, status.value,
    )
    return Idea.model_validate(record)


async def update_idea(store: RecordStore, idea_id: str, patch: IdeaUpdate) -> Idea:
    """Apply a partial edit; append history only on a real status change."""
    supplied = patch.model_dump(exclude_unset=True)
    required = {f: supplied[f] for f in ("name", "hypothesis") if f in supplied}
    changes: Dict[str, object] = dict(_check_required(required)) if required else {}

    current = await get_idea(store, idea_id)

    if "source" in supplied:
        changes["source"] = patch.source.value if patch.source else None

    new_status = supplied.get("validation_status")
    if new_status is not None and new_status != current.validation_status:
        changes["validation_status"] = new_status.value
        changes["status_history"] = list(current.status_history) + [serialize_history_entry(new_status)]
        logger.info(
            "Idea #%s in %s/%s: %s -> %s",
            current.idea_number, current.portfolio_code, current.product_code,
            current.validation_status.value if current.validation_status else None,
            new_status.value,
        )

    if not changes:
        return current

    record = await store.update(TABLE, idea_id, changes)
    return Idea.model_validate(record)


async def upvote_idea(store: RecordStore, idea_id: str, observed_count: int) -> Idea:
    """Write ``observed_count + 1``. Read-then-write, not an atomic increment."""
    record = await store.update(TABLE, idea_id, {"upvotes": observed_count + 1})
    return Idea.model_validate(record)


async def delete_idea(store: RecordStore, idea_id: str) -> None:
    """Store-level delete. Numbers of deleted ideas are never reassigned."""
    await store.delete(TABLE, idea_id)
    logger.info("Deleted idea %s", idea_id)
