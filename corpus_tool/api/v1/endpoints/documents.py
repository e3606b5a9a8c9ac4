"""
Document curation API endpoints.

Preview builds a record from form fields without touching the store; the
operator then submits that record as-is to be inserted.
"""
from typing import List
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from corpus_tool.core.config import settings
from corpus_tool.core.exceptions import CorpusError, ValidationError
from corpus_tool.models import DocumentRecord, utcnow
from corpus_tool.schemas.document import (
    DeleteResponse,
    DocumentFields,
    DocumentSummary,
    DocumentUpdate,
    InsertResponse,
    PreviewResponse,
    TextStatsResponse,
)
from corpus_tool.services.corpus_store import CorpusStore, get_corpus_store
from corpus_tool.services.record_builder import prepare_record
from corpus_tool.services.text_normalizer import normalize, text_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/preview", response_model=PreviewResponse)
async def preview_document(fields: DocumentFields):
    """Clean the pasted text and build the record the operator will submit."""
    record = prepare_record(fields)
    stats = text_stats(record.content_text)
    return PreviewResponse(
        document=record,
        stats=TextStatsResponse(
            characters=stats.characters, words=stats.words, tokens=stats.tokens
        ),
    )


@router.post("", response_model=InsertResponse)
async def insert_document(
    record: DocumentRecord,
    store: CorpusStore = Depends(get_corpus_store),
):
    """Insert a previewed document record into the corpus."""
    # Records built by the preview are already clean; this catches hand-made ones
    cleaned_text = normalize(record.content_text)
    if not cleaned_text:
        raise ValidationError("Missing required field: content_text")
    record.content_text = cleaned_text

    now = utcnow()
    record.created_at = now
    record.updated_at = now

    try:
        inserted_id = await store.insert_document(record)
    except CorpusError:
        raise
    except Exception as e:
        logger.exception(f"Error inserting document {record.document_id}")
        raise HTTPException(status_code=500, detail=f"Failed to insert document: {e}")

    return InsertResponse(insertedId=inserted_id)


@router.get("", response_model=List[DocumentSummary])
async def list_documents(
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    store: CorpusStore = Depends(get_corpus_store),
):
    """List recent documents (metadata only, no content text)."""
    try:
        documents = await store.find_documents({}, limit)
    except CorpusError:
        raise
    except Exception as e:
        logger.exception("Error fetching documents")
        raise HTTPException(status_code=500, detail=f"Failed to fetch documents: {e}")

    return [DocumentSummary.from_record(doc) for doc in documents]


@router.get("/{document_id}")
async def get_document(
    document_id: str,
    store: CorpusStore = Depends(get_corpus_store),
):
    """Get a full document record by ID."""
    try:
        document = await store.get_document_by_id(document_id)
    except CorpusError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching document {document_id}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch document: {e}")

    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    return document


@router.patch("/{document_id}")
async def update_document(
    document_id: str,
    document_update: DocumentUpdate,
    store: CorpusStore = Depends(get_corpus_store),
):
    """Merge changes into a document and bump its version."""
    try:
        document = await store.update_document(document_id, document_update.patch)
    except CorpusError:
        raise
    except Exception as e:
        logger.exception(f"Error updating document {document_id}")
        raise HTTPException(status_code=500, detail=f"Failed to update document: {e}")

    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    return document


@router.delete("/{document_id}", response_model=DeleteResponse)
async def delete_document(
    document_id: str,
    store: CorpusStore = Depends(get_corpus_store),
):
    """Delete a document. Deleting a missing document succeeds."""
    try:
        deleted_count = await store.delete_document(document_id)
    except CorpusError:
        raise
    except Exception as e:
        logger.exception(f"Error deleting document {document_id}")
        raise HTTPException(status_code=500, detail=f"Failed to delete document: {e}")

    return DeleteResponse(deletedCount=deleted_count)
