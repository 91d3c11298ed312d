"""Knowledge-base routes.

Endpoints (all under /{portfolio_code}/{product_code}/kb):
  GET    ""              — documents for the product, newest first
  POST   ""              — create a document
  GET    "/{document_id}" — single document
  PUT    "/{document_id}" — replace title/content
  DELETE "/{document_id}" — delete a document
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ..exceptions import NotFoundError
from ..schemas.kb_schema import KBDocument, KBDocumentInput, KBDocumentListResponse
from ..services.auth_dependency import get_store, require_session
from ..services.kb_service import (
    create_kb_document,
    delete_kb_document,
    get_kb_document,
    list_kb_documents,
    update_kb_document,
)
from ..services.record_store import RecordStore

router = APIRouter(
    prefix="/{portfolio_code}/{product_code}/kb",
    tags=["Knowledge Base"],
    dependencies=[Depends(require_session)],
)


async def _scoped_document(
    store: RecordStore, portfolio_code: str, product_code: str, document_id: str
) -> KBDocument:
    document = await get_kb_document(store, document_id)
    if document.portfolio_code != portfolio_code or document.product_code != product_code:
        raise NotFoundError("KBDocument", document_id, f"KB Document with ID {document_id} not found")
    return document


@router.get("", response_model=KBDocumentListResponse, summary="List KB documents")
async def list_documents(
    portfolio_code: str,
    product_code: str,
    store: RecordStore = Depends(get_store),
) -> KBDocumentListResponse:
    documents = await list_kb_documents(store, portfolio_code, product_code)
    return KBDocumentListResponse(
        portfolio_code=portfolio_code,
        product_code=product_code,
        count=len(documents),
        documents=documents,
    )


@router.post(
    "",
    response_model=KBDocument,
    status_code=status.HTTP_201_CREATED,
    summary="Create a KB document",
)
async def new_document(
    portfolio_code: str,
    product_code: str,
    payload: KBDocumentInput,
    store: RecordStore = Depends(get_store),
) -> KBDocument:
    return await create_kb_document(store, portfolio_code, product_code, payload)


@router.get("/{document_id}", response_model=KBDocument, summary="Get a KB document")
async def document_detail(
    portfolio_code: str,
    product_code: str,
    document_id: str,
    store: RecordStore = Depends(get_store),
) -> KBDocument:
    return await _scoped_document(store, portfolio_code, product_code, document_id)


@router.put("/{document_id}", response_model=KBDocument, summary="Update a KB document")
async def edit_document(
    portfolio_code: str,
    product_code: str,
    document_id: str,
    payload: KBDocumentInput,
    store: RecordStore = Depends(get_store),
) -> KBDocument:
    await _scoped_document(store, portfolio_code, product_code, document_id)
    return await update_kb_document(store, document_id, payload)


@router.delete(
    "/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a KB document",
)
async def remove_document(
    portfolio_code: str,
    product_code: str,
    document_id: str,
    store: RecordStore = Depends(get_store),
) -> Response:
    await _scoped_document(store, portfolio_code, product_code, document_id)
    await delete_kb_document(store, document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
