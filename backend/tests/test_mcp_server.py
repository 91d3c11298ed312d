"""MCP tool tests — results, not-found text, and isError reporting."""

import asyncio
import json
import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from product_flow.database import Base, make_session_factory
from product_flow.exceptions import StoreUnavailable
from product_flow.mcp_server import build_server, call_tool, list_tool_definitions
from product_flow.seed import seed_test_data
from product_flow.services.record_store import RecordStore

TEST_DATABASE_URL = "sqlite:///./test_mcp_server.db"
SessionLocal = make_session_factory(TEST_DATABASE_URL)
engine = SessionLocal.kw["bind"]
store = RecordStore(SessionLocal)

SCOPE = {"portfolioCode": "test", "productCode": "test-web-app"}


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seeded():
    asyncio.run(seed_test_data(store))


def _text(result):
    assert len(result.content) == 1
    return result.content[0].text


def _json(result):
    assert not result.isError
    return json.loads(_text(result))


class TestToolDefinitions:
    def test_five_tools(self):
        names = [tool.name for tool in list_tool_definitions()]
        assert names == ["get_idea", "list_ideas", "list_portfolios", "get_kb_document", "list_kb_documents"]

    def test_required_arguments(self):
        tools = {tool.name: tool for tool in list_tool_definitions()}
        assert tools["get_idea"].inputSchema["required"] == ["portfolioCode", "productCode", "ideaNumber"]
        assert tools["list_ideas"].inputSchema["required"] == ["portfolioCode", "productCode"]
        assert tools["get_kb_document"].inputSchema["required"] == ["id"]

    def test_server_builds(self):
        assert build_server(store).name == "product-flow"


class TestIdeaTools:
    @pytest.mark.asyncio
    async def test_get_idea(self, seeded):
        data = _json(await call_tool(store, "get_idea", {**SCOPE, "ideaNumber": 3}))
        assert data["name"] == "Alpha Feature"
        assert data["validationStatus"] == "scaling"
        assert data["source"] == "userResearch"
        assert set(data) == {
            "id", "ideaNumber", "name", "hypothesis", "validationStatus", "upvotes",
            "source", "portfolioCode", "productCode", "createdAt", "updatedAt",
        }

    @pytest.mark.asyncio
    async def test_get_idea_not_found_is_not_an_error(self, seeded):
        result = await call_tool(store, "get_idea", {**SCOPE, "ideaNumber": 42})
        assert not result.isError
        assert _text(result) == "Idea #42 not found in test/test-web-app"

    @pytest.mark.asyncio
    async def test_list_ideas_ascending_summary(self, seeded):
        data = _json(await call_tool(store, "list_ideas", SCOPE))
        assert data["count"] == 5
        assert [i["ideaNumber"] for i in data["ideas"]] == [1, 2, 3, 4, 5]
        assert set(data["ideas"][0]) == {"ideaNumber", "name", "validationStatus", "upvotes"}

    @pytest.mark.asyncio
    async def test_list_ideas_by_status(self, seeded):
        data = _json(await call_tool(store, "list_ideas", {**SCOPE, "validationStatus": "firstLevel"}))
        assert [i["name"] for i in data["ideas"]] == ["Test Feature One", "Zebra Feature", "Beta Feature"]

    @pytest.mark.asyncio
    async def test_list_ideas_other_portfolio_is_empty(self, seeded):
        data = _json(await call_tool(store, "list_ideas", {"portfolioCode": "other", "productCode": "test-web-app"}))
        assert data["count"] == 0


class TestPortfolioAndKBTools:
    @pytest.mark.asyncio
    async def test_list_portfolios(self, seeded):
        data = _json(await call_tool(store, "list_portfolios", {}))
        assert data["count"] == 1
        assert data["portfolios"][0] == {
            "code": "test",
            "name": "Test Portfolio",
            "organizationName": "E2E Tests",
            "products": [{"code": "test-web-app", "name": "Test Web App"}],
        }

    @pytest.mark.asyncio
    async def test_kb_documents(self):
        record = await store.create("KBDocument", {
            "title": "Personas", "content": "## Buyer", "portfolio_code": "test", "product_code": "test-web-app",
        })

        listing = _json(await call_tool(store, "list_kb_documents", SCOPE))
        assert listing["count"] == 1
        assert set(listing["documents"][0]) == {"id", "title", "createdAt"}

        document = _json(await call_tool(store, "get_kb_document", {"id": record["id"]}))
        assert document["content"] == "## Buyer"

    @pytest.mark.asyncio
    async def test_kb_document_not_found(self):
        result = await call_tool(store, "get_kb_document", {"id": "missing"})
        assert not result.isError
        assert _text(result) == "KB Document with ID missing not found"


class TestErrors:
    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        result = await call_tool(store, "delete_everything", {})
        assert result.isError
        assert _text(result) == "Unknown tool: delete_everything"

    @pytest.mark.asyncio
    async def test_missing_argument(self):
        result = await call_tool(store, "list_ideas", {"portfolioCode": "test"})
        assert result.isError
        assert "productCode" in json.loads(_text(result))["error"]

    @pytest.mark.asyncio
    async def test_bad_status(self):
        result = await call_tool(store, "list_ideas", {**SCOPE, "validationStatus": "validated"})
        assert result.isError
        assert "error" in json.loads(_text(result))

    @pytest.mark.asyncio
    async def test_store_failure(self, monkeypatch):
        async def down(*args, **kwargs):
            raise StoreUnavailable("Portfolio.list timed out after 10.0s")

        monkeypatch.setattr(store, "list", down)
        result = await call_tool(store, "list_portfolios", None)
        assert result.isError
        assert json.loads(_text(result)) == {"error": "Portfolio.list timed out after 10.0s"}
