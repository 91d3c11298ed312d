"""Record store — a small document-store façade over SQLAlchemy.

Every caller (routes, services, the MCP server) reaches persistence through
one explicitly constructed ``RecordStore`` instance; there is no module-level
client. Records go in and come out as plain dicts keyed by column name.

Contract
--------
  create(table, fields)               → record
  get(table, key)                     → record | None
  list(table, filter?, sort?)         → [record]   exact-match AND filter
  list_by_index(table, index, value)  → [record]   declared indexes only
  update(table, key, patch)           → record     NotFoundError if absent
  delete(table, key)                  → None       NotFoundError if absent

There are no multi-record transactions and no conditional writes: callers
doing read-modify-write can race with each other.

Every call runs in a worker thread and is bounded by ``timeout`` seconds.
Timeouts and engine failures surface as ``StoreUnavailable``.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..database import STORE_TIMEOUT_SECONDS
from ..exceptions import NotFoundError, StoreUnavailable
from ..models import Idea, KBDocument, Portfolio, Studio, StudioUser

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

TABLES: Dict[str, type] = {
    "Portfolio": Portfolio,
    "Idea": Idea,
    "KBDocument": KBDocument,
    "Studio": Studio,
    "StudioUser": StudioUser,
}

# Pre-built secondary indexes; nothing else is queryable by key
SECONDARY_INDEXES: Dict[str, frozenset] = {
    "Idea": frozenset({"name", "validation_status", "source", "portfolio_code", "product_code"}),
    "KBDocument": frozenset({"portfolio_code", "product_code"}),
    "StudioUser": frozenset({"email"}),
}


def _plain(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, datetime) and value.tzinfo is None:
        # SQLite drops the offset; everything is written in UTC
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_record(row: Any) -> Record:
    return {column.key: _plain(getattr(row, column.key)) for column in row.__table__.columns}


class RecordStore:
    """Async CRUD/query client over a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker, timeout: float = STORE_TIMEOUT_SECONDS):
        self.session_factory = session_factory
        self.timeout = timeout

    # ── Public contract ─────────────────────────────────────────────────

    async def create(self, table: str, fields: Record) -> Record:
        return await self._run(table, "create", self._create, table, fields)

    async def get(self, table: str, key: Any) -> Optional[Record]:
        return await self._run(table, "get", self._get, table, key)

    async def list(
        self,
        table: str,
        filter: Optional[Record] = None,
        sort: Optional[str] = None,
    ) -> List[Record]:
        return await self._run(table, "list", self._list, table, filter or {}, sort)

    async def list_by_index(self, table: str, index_key: str, value: Any) -> List[Record]:
        if index_key not in SECONDARY_INDEXES.get(table, frozenset()):
            raise ValueError(f"No secondary index '{index_key}' on {table}")
        return await self._run(table, "list_by_index", self._list, table, {index_key: value}, None)

    async def update(self, table: str, key: Any, patch: Record) -> Record:
        return await self._run(table, "update", self._update, table, key, patch)

    async def delete(self, table: str, key: Any) -> None:
        await self._run(table, "delete", self._delete, table, key)

    # ── Plumbing ────────────────────────────────────────────────────────

    async def _run(self, table: str, operation: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Record store %s.%s timed out after %ss", table, operation, self.timeout)
            raise StoreUnavailable(f"{table}.{operation} timed out after {self.timeout}s") from exc
        except SQLAlchemyError as exc:
            logger.warning("Record store %s.%s failed: %s", table, operation, exc)
            raise StoreUnavailable(f"{table}.{operation} failed: {exc}") from exc

    @staticmethod
    def _model(table: str) -> type:
        try:
            return TABLES[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None

    @staticmethod
    def _column(model: type, field: str):
        if field not in model.__table__.columns:
            raise ValueError(f"Unknown field '{field}' on {model.__name__}")
        return getattr(model, field)

    def _create(self, table: str, fields: Record) -> Record:
        model = self._model(table)
        with self.session_factory() as db:
            row = model(**fields)
            db.add(row)
            db.commit()
            db.refresh(row)
            return _to_record(row)

    def _get(self, table: str, key: Any) -> Optional[Record]:
        model = self._model(table)
        with self.session_factory() as db:
            row = db.get(model, key)
            return _to_record(row) if row is not None else None

    def _list(self, table: str, filter: Record, sort: Optional[str]) -> List[Record]:
        model = self._model(table)
        with self.session_factory() as db:
            query = db.query(model)
            for field, value in filter.items():
                query = query.filter(self._column(model, field) == value)
            if sort:
                column = self._column(model, sort.lstrip("-"))
                query = query.order_by(column.desc() if sort.startswith("-") else column.asc())
            return [_to_record(row) for row in query.all()]

    def _update(self, table: str, key: Any, patch: Record) -> Record:
        model = self._model(table)
        with self.session_factory() as db:
            row = db.get(model, key)
            if row is None:
                raise NotFoundError(table, key)
            for field, value in patch.items():
                self._column(model, field)
                setattr(row, field, value)
            db.commit()
            db.refresh(row)
            return _to_record(row)

    def _delete(self, table: str, key: Any) -> None:
        model = self._model(table)
        with self.session_factory() as db:
            row = db.get(model, key)
            if row is None:
                raise NotFoundError(table, key)
            db.delete(row)
            db.commit()
