"""Portfolio service tests — creation, product/owner appends, tolerant parsing."""

import json
import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from product_flow.database import Base, make_session_factory
from product_flow.exceptions import NotFoundError, ValidationError
from product_flow.schemas.portfolio_schema import OwnerCreate, PortfolioCreate, ProductCreate
from product_flow.services.portfolio_service import (
    add_owner,
    add_product,
    create_portfolio,
    get_portfolio,
    list_portfolios,
    parse_products,
)
from product_flow.services.record_store import RecordStore

TEST_DATABASE_URL = "sqlite:///./test_portfolios.db"
SessionLocal = make_session_factory(TEST_DATABASE_URL)
engine = SessionLocal.kw["bind"]
store = RecordStore(SessionLocal)


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


async def _portfolio(code="acme"):
    return await create_portfolio(
        store, PortfolioCreate(code=code, organization_name="Acme Corp", name="All Products")
    )


class TestParseProducts:
    def test_list_of_dicts(self):
        products = parse_products([{"code": "web", "name": "Web"}])
        assert [(p.code, p.name) for p in products] == [("web", "Web")]

    def test_serialized_string(self):
        products = parse_products(json.dumps([{"code": "web", "name": "Web"}]))
        assert products[0].code == "web"

    def test_garbage_is_empty(self):
        assert parse_products("{not json") == []
        assert parse_products({"code": "web"}) == []
        assert parse_products(None) == []

    def test_incomplete_items_dropped(self):
        products = parse_products([{"code": "web"}, "text", {"code": "app", "name": "App"}])
        assert [p.code for p in products] == ["app"]


class TestCreatePortfolio:
    @pytest.mark.asyncio
    async def test_create_and_get(self):
        await _portfolio()
        portfolio = await get_portfolio(store, "acme")
        assert portfolio.organization_name == "Acme Corp"
        assert portfolio.products == []
        assert portfolio.owners == []

    @pytest.mark.asyncio
    async def test_code_must_be_url_safe(self):
        with pytest.raises(ValidationError) as exc_info:
            await create_portfolio(store, PortfolioCreate(code="Acme Corp!", organization_name="", name="x"))
        assert set(exc_info.value.errors) == {"code", "organizationName"}

    @pytest.mark.asyncio
    async def test_duplicate_code(self):
        await _portfolio()
        with pytest.raises(ValidationError):
            await _portfolio()

    @pytest.mark.asyncio
    async def test_missing_portfolio(self):
        with pytest.raises(NotFoundError, match="Portfolio not found"):
            await get_portfolio(store, "ghost")

    @pytest.mark.asyncio
    async def test_list_sorted_by_code(self):
        await _portfolio("zeta")
        await _portfolio("alpha")
        assert [p.code for p in await list_portfolios(store)] == ["alpha", "zeta"]


class TestAppends:
    @pytest.mark.asyncio
    async def test_add_products_in_order(self):
        await _portfolio()
        await add_product(store, "acme", ProductCreate(code="web", name="Web App"))
        portfolio = await add_product(store, "acme", ProductCreate(code="mobile", name="Mobile App"))
        assert [p.code for p in portfolio.products] == ["web", "mobile"]

    @pytest.mark.asyncio
    async def test_duplicate_product_code_rejected(self):
        await _portfolio()
        await add_product(store, "acme", ProductCreate(code="web", name="Web App"))
        with pytest.raises(ValidationError):
            await add_product(store, "acme", ProductCreate(code="web", name="Other"))

    @pytest.mark.asyncio
    async def test_product_on_missing_portfolio(self):
        with pytest.raises(NotFoundError):
            await add_product(store, "ghost", ProductCreate(code="web", name="Web"))

    @pytest.mark.asyncio
    async def test_owner_lowercased_and_deduplicated(self):
        await _portfolio()
        await add_owner(store, "acme", OwnerCreate(email="Owner@Acme.io"))
        portfolio = await add_owner(store, "acme", OwnerCreate(email="owner@acme.io "))
        assert portfolio.owners == ["owner@acme.io"]

    @pytest.mark.asyncio
    async def test_owner_email_required(self):
        await _portfolio()
        with pytest.raises(ValidationError):
            await add_owner(store, "acme", OwnerCreate(email="not-an-email"))
