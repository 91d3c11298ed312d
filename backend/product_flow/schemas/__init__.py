# Schemas package
from .idea_schema import (
    HistoryEntry,
    Idea,
    IdeaCreate,
    IdeaDetail,
    IdeaUpdate,
    Source,
    ValidationStatus,
)
from .kb_schema import KBDocument, KBDocumentInput
from .portfolio_schema import Portfolio, PortfolioCreate, Product, ProductCreate

__all__ = [
    "HistoryEntry",
    "Idea",
    "IdeaCreate",
    "IdeaDetail",
    "IdeaUpdate",
    "Source",
    "ValidationStatus",
    "KBDocument",
    "KBDocumentInput",
    "Portfolio",
    "PortfolioCreate",
    "Product",
    "ProductCreate",
]
