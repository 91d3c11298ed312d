"""Idea routes — list/funnel views, detail, create, edit, upvote.

Endpoints (all under /{portfolio_code}/{product_code}/ideas):
  GET   ""                       — list view (?sort=&filter=)
  GET   "/funnel"                — ideas grouped by validation status
  POST  ""                       — create an idea
  GET   "/{idea_number}"         — idea detail with history, newest first
  PATCH "/{idea_number}"         — edit name/hypothesis/status/source
  POST  "/{idea_number}/upvote"  — record one upvote
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ..constants import DEFAULT_FILTER, DEFAULT_SORT
from ..exceptions import NotFoundError
from ..schemas.idea_schema import (
    FunnelResponse,
    Idea,
    IdeaCreate,
    IdeaDetail,
    IdeaInput,
    IdeaListResponse,
    IdeaUpdate,
    UpvoteRequest,
)
from ..services.auth_dependency import get_store, require_session
from ..services.idea_domain import parse_status_history
from ..services.idea_service import (
    create_idea,
    get_idea_by_number,
    list_ideas,
    update_idea,
    upvote_idea,
)
from ..services.idea_views import (
    FilterField,
    SortField,
    compose_list_view,
    funnel_counts,
    group_by_validation_status,
)
from ..services.portfolio_service import get_portfolio
from ..services.record_store import RecordStore

router = APIRouter(
    prefix="/{portfolio_code}/{product_code}/ideas",
    tags=["Ideas"],
    dependencies=[Depends(require_session)],
)


async def _require_product(store: RecordStore, portfolio_code: str, product_code: str) -> None:
    portfolio = await get_portfolio(store, portfolio_code)
    if not any(product.code == product_code for product in portfolio.products):
        raise NotFoundError("Product", product_code, f"Product {product_code} not found in {portfolio_code}")


def _detail(idea: Idea) -> IdeaDetail:
    return IdeaDetail(**idea.model_dump(), history=parse_status_history(idea.status_history))


@router.get(
    "",
    response_model=IdeaListResponse,
    summary="List ideas for a product",
)
async def list_product_ideas(
    portfolio_code: str,
    product_code: str,
    sort: SortField = Query(SortField(DEFAULT_SORT)),
    filter: FilterField = Query(FilterField(DEFAULT_FILTER)),
    store: RecordStore = Depends(get_store),
) -> IdeaListResponse:
    """Filter then sort the product's ideas; both parameters compose freely."""
    await _require_product(store, portfolio_code, product_code)
    ideas = compose_list_view(await list_ideas(store, portfolio_code, product_code), sort, filter)
    return IdeaListResponse(
        portfolio_code=portfolio_code,
        product_code=product_code,
        sort=sort.value,
        filter=filter.value,
        count=len(ideas),
        ideas=ideas,
    )


@router.get(
    "/funnel",
    response_model=FunnelResponse,
    summary="Ideas grouped by validation status",
)
async def idea_funnel(
    portfolio_code: str,
    product_code: str,
    store: RecordStore = Depends(get_store),
) -> FunnelResponse:
    await _require_product(store, portfolio_code, product_code)
    groups = group_by_validation_status(await list_ideas(store, portfolio_code, product_code))
    return FunnelResponse(
        portfolio_code=portfolio_code,
        product_code=product_code,
        counts=funnel_counts(groups),
        stages=groups,
    )


@router.post(
    "",
    response_model=IdeaDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a new idea",
)
async def submit_idea(
    portfolio_code: str,
    product_code: str,
    payload: IdeaInput,
    store: RecordStore = Depends(get_store),
) -> IdeaDetail:
    await _require_product(store, portfolio_code, product_code)
    idea = await create_idea(
        store,
        IdeaCreate(portfolio_code=portfolio_code, product_code=product_code, **payload.model_dump()),
    )
    return _detail(idea)


@router.get(
    "/{idea_number}",
    response_model=IdeaDetail,
    summary="Get an idea by its number",
)
async def get_product_idea(
    portfolio_code: str,
    product_code: str,
    idea_number: int,
    store: RecordStore = Depends(get_store),
) -> IdeaDetail:
    return _detail(await get_idea_by_number(store, portfolio_code, product_code, idea_number))


@router.patch(
    "/{idea_number}",
    response_model=IdeaDetail,
    summary="Edit an idea",
)
async def edit_idea(
    portfolio_code: str,
    product_code: str,
    idea_number: int,
    patch: IdeaUpdate,
    store: RecordStore = Depends(get_store),
) -> IdeaDetail:
    idea = await get_idea_by_number(store, portfolio_code, product_code, idea_number)
    return _detail(await update_idea(store, idea.id, patch))


@router.post(
    "/{idea_number}/upvote",
    response_model=Idea,
    summary="Upvote an idea",
)
async def upvote_product_idea(
    portfolio_code: str,
    product_code: str,
    idea_number: int,
    body: UpvoteRequest,
    store: RecordStore = Depends(get_store),
) -> Idea:
    """Write ``observedUpvotes + 1``; the client sends the count it last saw."""
    idea = await get_idea_by_number(store, portfolio_code, product_code, idea_number)
    return await upvote_idea(store, idea.id, body.observed_upvotes)
