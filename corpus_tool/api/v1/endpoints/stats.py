"""Collection statistics endpoint."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from corpus_tool.core.exceptions import CorpusError
from corpus_tool.schemas.document import CollectionStats
from corpus_tool.services.corpus_store import CorpusStore, get_corpus_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=CollectionStats)
async def get_stats(store: CorpusStore = Depends(get_corpus_store)):
    """Totals across the whole corpus."""
    try:
        stats = await store.get_collection_stats()
    except CorpusError:
        raise
    except Exception:
        logger.exception("Error fetching stats")
        raise HTTPException(status_code=500, detail="Failed to fetch collection statistics")
    return CollectionStats(**stats)
