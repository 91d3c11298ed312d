"""Pydantic schemas for knowledge-base documents."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .idea_schema import CamelModel


class KBDocument(CamelModel):
    id: str
    title: str
    content: str
    portfolio_code: Optional[str] = None
    product_code: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class KBDocumentInput(CamelModel):
    """Create/update body. Both fields are required after trimming."""

    title: str = ""
    content: str = ""


class KBDocumentSummary(CamelModel):
    id: str
    title: str
    created_at: Optional[datetime] = None


class KBDocumentListResponse(CamelModel):
    portfolio_code: str
    product_code: str
    count: int
    documents: List[KBDocument] = Field(default_factory=list)
