"""Studio login — resolve an email to its studio and landing page."""

from __future__ import annotations

import logging

from ..exceptions import NotFoundError
from .portfolio_service import parse_products
from .record_store import RecordStore

logger = logging.getLogger(__name__)

FALLBACK_LANDING = "/portfolios"


async def resolve_login(store: RecordStore, email: str) -> str:
    """Check *email* belongs to a studio and return where to send the user.

    The user lands on the ideas list of the first product of their studio's
    portfolio, or on the portfolio list when that chain is incomplete.
    """
    normalized = email.strip().lower()
    memberships = await store.list_by_index("StudioUser", "email", normalized)
    if not memberships:
        raise NotFoundError("StudioUser", normalized, "No studio found for this email")

    studio = await store.get("Studio", memberships[0]["studio_id"])
    if studio is None or not studio.get("portfolio_id"):
        logger.info("Studio for %s has no portfolio; using fallback landing", normalized)
        return FALLBACK_LANDING

    portfolio = await store.get("Portfolio", studio["portfolio_id"])
    if portfolio is None:
        return FALLBACK_LANDING

    products = parse_products(portfolio.get("products"))
    if not products:
        return FALLBACK_LANDING
    return f"/{portfolio['code']}/{products[0].code}/ideas"
