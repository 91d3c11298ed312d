"""Knowledge-base documents — plain CRUD scoped to one product."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List

from ..exceptions import NotFoundError, ValidationError
from ..schemas.kb_schema import KBDocument, KBDocumentInput
from .record_store import RecordStore

logger = logging.getLogger(__name__)

TABLE = "KBDocument"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _check(payload: KBDocumentInput) -> dict:
    title = payload.title.strip()
    content = payload.content.strip()
    errors = {}
    if not title:
        errors["title"] = "Title is required"
    if not content:
        errors["content"] = "Content is required"
    if errors:
        raise ValidationError(errors)
    return {"title": title, "content": content}


async def list_kb_documents(store: RecordStore, portfolio_code: str, product_code: str) -> List[KBDocument]:
    """Documents for one product, newest first. Untitled rows are skipped."""
    records = await store.list_by_index(TABLE, "product_code", product_code)
    documents = [
        KBDocument.model_validate(r)
        for r in records
        if r.get("title") and r.get("portfolio_code") == portfolio_code
    ]
    documents.sort(key=lambda doc: doc.created_at or _EPOCH, reverse=True)
    return documents


async def get_kb_document(store: RecordStore, document_id: str) -> KBDocument:
    record = await store.get(TABLE, document_id)
    if record is None:
        raise NotFoundError("KBDocument", document_id, f"KB Document with ID {document_id} not found")
    return KBDocument.model_validate(record)


async def create_kb_document(
    store: RecordStore,
    portfolio_code: str,
    product_code: str,
    payload: KBDocumentInput,
) -> KBDocument:
    fields = _check(payload)
    record = await store.create(TABLE, {**fields, "portfolio_code": portfolio_code, "product_code": product_code})
    logger.info("Created KB document %s in %s/%s", record["id"], portfolio_code, product_code)
    return KBDocument.model_validate(record)


async def update_kb_document(store: RecordStore, document_id: str, payload: KBDocumentInput) -> KBDocument:
    fields = _check(payload)
    record = await store.update(TABLE, document_id, fields)
    return KBDocument.model_validate(record)


async def delete_kb_document(store: RecordStore, document_id: str) -> None:
    await store.delete(TABLE, document_id)
    logger.info("Deleted KB document %s", document_id)
