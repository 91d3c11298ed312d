"""Portfolio routes — list, create, inspect, and grow portfolios.

Endpoints:
  GET  /portfolios                 — all portfolios with parsed products
  POST /portfolios                 — create a portfolio
  GET  /portfolios/{code}          — single portfolio
  POST /portfolios/{code}/products — append a product
  POST /portfolios/{code}/owners   — append an owner email
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..schemas.portfolio_schema import (
    OwnerCreate,
    Portfolio,
    PortfolioCreate,
    PortfolioListResponse,
    ProductCreate,
)
from ..services.auth_dependency import get_store, require_session
from ..services.portfolio_service import (
    add_owner,
    add_product,
    create_portfolio,
    get_portfolio,
    list_portfolios,
)
from ..services.record_store import RecordStore

router = APIRouter(
    prefix="/portfolios",
    tags=["Portfolios"],
    dependencies=[Depends(require_session)],
)


@router.get("", response_model=PortfolioListResponse, summary="List portfolios")
async def list_all_portfolios(store: RecordStore = Depends(get_store)) -> PortfolioListResponse:
    portfolios = await list_portfolios(store)
    return PortfolioListResponse(count=len(portfolios), portfolios=portfolios)


@router.post(
    "",
    response_model=Portfolio,
    status_code=status.HTTP_201_CREATED,
    summary="Create a portfolio",
)
async def new_portfolio(payload: PortfolioCreate, store: RecordStore = Depends(get_store)) -> Portfolio:
    return await create_portfolio(store, payload)


@router.get("/{code}", response_model=Portfolio, summary="Get a portfolio by code")
async def portfolio_detail(code: str, store: RecordStore = Depends(get_store)) -> Portfolio:
    return await get_portfolio(store, code)


@router.post(
    "/{code}/products",
    response_model=Portfolio,
    status_code=status.HTTP_201_CREATED,
    summary="Add a product to a portfolio",
)
async def new_product(code: str, payload: ProductCreate, store: RecordStore = Depends(get_store)) -> Portfolio:
    return await add_product(store, code, payload)


@router.post(
    "/{code}/owners",
    response_model=Portfolio,
    summary="Add an owner to a portfolio",
)
async def new_owner(code: str, payload: OwnerCreate, store: RecordStore = Depends(get_store)) -> Portfolio:
    return await add_owner(store, code, payload)
