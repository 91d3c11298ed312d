"""Centralized vocabulary shared by the API, the views, and the MCP server.

The status strings are part of the persisted format and the MCP/API
contract; renaming any of them is a breaking change.
"""

from __future__ import annotations

# ── Validation status ───────────────────────────────────────────────────
# Ordered by funnel position. The rank table drives status sorting.

VALIDATION_STATUSES: list[str] = [
    "backlog",
    "firstLevel",
    "secondLevel",
    "scaling",
    "failed",
]

STATUS_RANK: dict[str, int] = {status: rank for rank, status in enumerate(VALIDATION_STATUSES)}

# Unknown or missing statuses sort after every known one
UNRANKED_STATUS: int = 999

DEFAULT_VALIDATION_STATUS: str = "backlog"

# ── List view parameters (?sort=&filter=) ───────────────────────────────

DEFAULT_SORT: str = "age"
DEFAULT_FILTER: str = "all"

# ── Studio session ──────────────────────────────────────────────────────

SESSION_COOKIE_NAME: str = "studio_session"
