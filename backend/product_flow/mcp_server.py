#!/usr/bin/env python3
"""
MCP Server for Product Flow

Read-only tools for AI assistants over stdio:
- get_idea: one idea by its number within a product
- list_ideas: a product's ideas, optionally filtered by validation status
- list_portfolios: every portfolio with its products
- get_kb_document / list_kb_documents: knowledge-base passthroughs

Every tool call is answered with a result; failures come back with
``isError`` set instead of being raised to the transport.
"""

import json
import logging
import sys
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions

from .constants import VALIDATION_STATUSES
from .database import DATABASE_URL, STORE_TIMEOUT_SECONDS, init_db, make_session_factory
from .exceptions import NotFoundError
from .schemas.kb_schema import KBDocumentSummary
from .services.idea_service import get_idea_by_number, list_ideas
from .services.idea_views import FilterField, filter_ideas
from .services.kb_service import get_kb_document, list_kb_documents
from .services.portfolio_service import list_portfolios
from .services.record_store import RecordStore

# stdout carries the protocol; logs go to stderr
logging.basicConfig(level=logging.INFO, stream=sys.stderr)
logger = logging.getLogger(__name__)

SERVER_NAME = "product-flow"
SERVER_VERSION = "0.1.0"


class DateTimeEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return super().default(obj)


def _text(text: str, is_error: bool = False) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


def _json(result: Any) -> types.CallToolResult:
    return _text(json.dumps(result, indent=2, cls=DateTimeEncoder))


_SCOPE_PROPERTIES = {
    "portfolioCode": {
        "type": "string",
        "description": "Portfolio code, e.g. 'test'",
    },
    "productCode": {
        "type": "string",
        "description": "Product code within the portfolio, e.g. 'test-web-app'",
    },
}


def list_tool_definitions() -> List[types.Tool]:
    return [
        types.Tool(
            name="get_idea",
            description="Get a single idea by its number within a product",
            inputSchema={
                "type": "object",
                "properties": {
                    **_SCOPE_PROPERTIES,
                    "ideaNumber": {
                        "type": "integer",
                        "description": "The idea's number within the product (the N in #N)",
                    },
                },
                "required": ["portfolioCode", "productCode", "ideaNumber"],
            },
        ),
        types.Tool(
            name="list_ideas",
            description="List a product's ideas in idea-number order, optionally filtered by validation status",
            inputSchema={
                "type": "object",
                "properties": {
                    **_SCOPE_PROPERTIES,
                    "validationStatus": {
                        "type": "string",
                        "enum": list(VALIDATION_STATUSES),
                        "description": f"Only ideas with this status: {', '.join(VALIDATION_STATUSES)}",
                    },
                },
                "required": ["portfolioCode", "productCode"],
            },
        ),
        types.Tool(
            name="list_portfolios",
            description="List all portfolios with their products",
            inputSchema={"type": "object", "properties": {}},
        ),
        types.Tool(
            name="get_kb_document",
            description="Get a knowledge-base document by ID, including its markdown content",
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {"type": "string", "description": "Document ID"},
                },
                "required": ["id"],
            },
        ),
        types.Tool(
            name="list_kb_documents",
            description="List a product's knowledge-base documents, newest first",
            inputSchema={
                "type": "object",
                "properties": dict(_SCOPE_PROPERTIES),
                "required": ["portfolioCode", "productCode"],
            },
        ),
    ]


# ── Tool bodies ──────────────────────────────────────────────────────────

async def _get_idea(store: RecordStore, arguments: Dict[str, Any]) -> types.CallToolResult:
    portfolio_code = arguments["portfolioCode"]
    product_code = arguments["productCode"]
    idea_number = int(arguments["ideaNumber"])
    try:
        idea = await get_idea_by_number(store, portfolio_code, product_code, idea_number)
    except NotFoundError as exc:
        return _text(str(exc))

    data = idea.model_dump(mode="json", by_alias=True)
    return _json({
        key: data[key]
        for key in (
            "id", "ideaNumber", "name", "hypothesis", "validationStatus", "upvotes",
            "source", "portfolioCode", "productCode", "createdAt", "updatedAt",
        )
    })


async def _list_ideas(store: RecordStore, arguments: Dict[str, Any]) -> types.CallToolResult:
    portfolio_code = arguments["portfolioCode"]
    product_code = arguments["productCode"]
    status = arguments.get("validationStatus")

    ideas = await list_ideas(store, portfolio_code, product_code)
    if status:
        ideas = filter_ideas(ideas, FilterField(status))
    ideas = sorted(ideas, key=lambda idea: idea.idea_number)

    return _json({
        "portfolioCode": portfolio_code,
        "productCode": product_code,
        "count": len(ideas),
        "ideas": [
            {
                "ideaNumber": idea.idea_number,
                "name": idea.name,
                "validationStatus": idea.validation_status.value if idea.validation_status else None,
                "upvotes": idea.upvotes,
            }
            for idea in ideas
        ],
    })


async def _list_portfolios(store: RecordStore, arguments: Dict[str, Any]) -> types.CallToolResult:
    portfolios = await list_portfolios(store)
    return _json({
        "count": len(portfolios),
        "portfolios": [
            {
                "code": portfolio.code,
                "name": portfolio.name,
                "organizationName": portfolio.organization_name,
                "products": [product.model_dump() for product in portfolio.products],
            }
            for portfolio in portfolios
        ],
    })


async def _get_kb_document(store: RecordStore, arguments: Dict[str, Any]) -> types.CallToolResult:
    try:
        document = await get_kb_document(store, arguments["id"])
    except NotFoundError as exc:
        return _text(str(exc))
    return _json(document.model_dump(mode="json", by_alias=True))


async def _list_kb_documents(store: RecordStore, arguments: Dict[str, Any]) -> types.CallToolResult:
    portfolio_code = arguments["portfolioCode"]
    product_code = arguments["productCode"]
    documents = await list_kb_documents(store, portfolio_code, product_code)
    return _json({
        "portfolioCode": portfolio_code,
        "productCode": product_code,
        "count": len(documents),
        "documents": [
            KBDocumentSummary(id=doc.id, title=doc.title, created_at=doc.created_at).model_dump(mode="json", by_alias=True)
            for doc in documents
        ],
    })


TOOL_HANDLERS = {
    "get_idea": _get_idea,
    "list_ideas": _list_ideas,
    "list_portfolios": _list_portfolios,
    "get_kb_document": _get_kb_document,
    "list_kb_documents": _list_kb_documents,
}


async def call_tool(
    store: RecordStore, name: str, arguments: Optional[Dict[str, Any]]
) -> types.CallToolResult:
    """Dispatch one tool call. Never raises."""
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        return _text(f"Unknown tool: {name}", is_error=True)

    try:
        return await handler(store, arguments or {})
    except Exception as e:
        logger.warning("Tool %s failed: %s", name, e)
        message = f"Missing argument: {e.args[0]}" if isinstance(e, KeyError) else str(e)
        return _text(json.dumps({"error": message}, indent=2), is_error=True)


def build_server(store: RecordStore) -> Server:
    """Create the MCP server with every tool bound to *store*."""
    app = Server(SERVER_NAME)

    @app.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        """List all available tools"""
        return list_tool_definitions()

    @app.call_tool()
    async def handle_call_tool(name: str, arguments: dict | None) -> types.CallToolResult:
        """Handle tool calls"""
        return await call_tool(store, name, arguments)

    return app


async def _main():
    """Async main entry point for the MCP server"""
    session_factory = make_session_factory(DATABASE_URL)
    init_db(session_factory)
    store = RecordStore(session_factory, timeout=STORE_TIMEOUT_SECONDS)
    app = build_server(store)

    logger.info("Starting Product Flow MCP Server")
    logger.info(f"Database: {DATABASE_URL}")

    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        await app.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name=SERVER_NAME,
                server_version=SERVER_VERSION,
                capabilities=app.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )


def main():
    """Sync entry point for console script"""
    import asyncio
    asyncio.run(_main())


if __name__ == "__main__":
    main()
