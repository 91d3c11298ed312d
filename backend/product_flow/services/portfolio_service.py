"""Portfolio persistence — create, read, and append products/owners.

``add_product`` and ``add_owner`` are read-modify-write: they fetch the
current list, append, and write the whole list back. Two concurrent appends
to the same portfolio can race and one entry is lost.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List

from ..exceptions import NotFoundError, ValidationError
from ..schemas.portfolio_schema import (
    OwnerCreate,
    Portfolio,
    PortfolioCreate,
    Product,
    ProductCreate,
)
from .record_store import Record, RecordStore

logger = logging.getLogger(__name__)

TABLE = "Portfolio"

_CODE_RE = re.compile(r"^[a-z0-9][a-z0-9-]*$")


def parse_products(raw: Any) -> List[Product]:
    """Parse the stored products value; legacy rows hold a JSON string.

    Anything unreadable yields an empty list.
    """
    if not raw:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    if not isinstance(raw, list):
        return []

    products = []
    for item in raw:
        if isinstance(item, dict) and item.get("code") and item.get("name"):
            products.append(Product(code=str(item["code"]), name=str(item["name"])))
    return products


def _to_portfolio(record: Record) -> Portfolio:
    return Portfolio(
        code=record["code"],
        organization_name=record["organization_name"],
        name=record["name"],
        owners=[owner for owner in (record.get("owners") or []) if owner],
        products=parse_products(record.get("products")),
        created_at=record.get("created_at"),
        updated_at=record.get("updated_at"),
    )


def _validate_code(code: str, field: str, errors: dict) -> None:
    if not code:
        errors[field] = f"{field.capitalize()} is required"
    elif not _CODE_RE.match(code):
        errors[field] = f"{field.capitalize()} may only contain lowercase letters, numbers, and dashes"


async def list_portfolios(store: RecordStore) -> List[Portfolio]:
    return [_to_portfolio(r) for r in await store.list(TABLE, sort="code")]


async def get_portfolio(store: RecordStore, code: str) -> Portfolio:
    record = await store.get(TABLE, code)
    if record is None:
        raise NotFoundError("Portfolio", code, "Portfolio not found")
    return _to_portfolio(record)


async def create_portfolio(store: RecordStore, payload: PortfolioCreate) -> Portfolio:
    code = payload.code.strip()
    organization_name = payload.organization_name.strip()
    name = payload.name.strip()

    errors: dict = {}
    _validate_code(code, "code", errors)
    if not organization_name:
        errors["organizationName"] = "Organization name is required"
    if not name:
        errors["name"] = "Name is required"
    if errors:
        raise ValidationError(errors)

    if await store.get(TABLE, code) is not None:
        raise ValidationError({"code": f"Portfolio '{code}' already exists"})

    record = await store.create(TABLE, {
        "code": code,
        "organization_name": organization_name,
        "name": name,
        "owners": [],
        "products": [],
    })
    logger.info("Created portfolio %s", code)
    return _to_portfolio(record)


async def add_product(store: RecordStore, portfolio_code: str, payload: ProductCreate) -> Portfolio:
    """Append a product; its code must be unique within the portfolio."""
    code = payload.code.strip()
    name = payload.name.strip()

    errors: dict = {}
    _validate_code(code, "code", errors)
    if not name:
        errors["name"] = "Name is required"
    if errors:
        raise ValidationError(errors)

    portfolio = await get_portfolio(store, portfolio_code)
    if any(product.code == code for product in portfolio.products):
        raise ValidationError({"code": f"Product '{code}' already exists in {portfolio_code}"})

    products = [p.model_dump() for p in portfolio.products] + [{"code": code, "name": name}]
    record = await store.update(TABLE, portfolio_code, {"products": products})
    logger.info("Added product %s to portfolio %s", code, portfolio_code)
    return _to_portfolio(record)


async def add_owner(store: RecordStore, portfolio_code: str, payload: OwnerCreate) -> Portfolio:
    """Append an owner email (lower-cased); re-adding an owner is a no-op."""
    email = payload.email.strip().lower()
    if not email or "@" not in email:
        raise ValidationError({"email": "A valid email is required"})

    portfolio = await get_portfolio(store, portfolio_code)
    if email in portfolio.owners:
        return portfolio

    record = await store.update(TABLE, portfolio_code, {"owners": portfolio.owners + [email]})
    logger.info("Added owner %s to portfolio %s", email, portfolio_code)
    return _to_portfolio(record)
