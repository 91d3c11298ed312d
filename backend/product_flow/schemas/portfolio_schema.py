"""Pydantic schemas for portfolios and their products."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .idea_schema import CamelModel


class Product(CamelModel):
    code: str
    name: str


class Portfolio(CamelModel):
    """A portfolio with its products already parsed."""

    code: str
    organization_name: str
    name: str
    owners: List[str] = Field(default_factory=list)
    products: List[Product] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PortfolioCreate(CamelModel):
    code: str = ""
    organization_name: str = ""
    name: str = ""


class ProductCreate(CamelModel):
    code: str = ""
    name: str = ""


class OwnerCreate(CamelModel):
    email: str = ""


class PortfolioListResponse(CamelModel):
    count: int
    portfolios: List[Portfolio] = Field(default_factory=list)
