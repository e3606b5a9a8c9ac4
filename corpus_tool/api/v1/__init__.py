"""API v1 router."""
from fastapi import APIRouter
from .endpoints import documents, stats

router = APIRouter()

# Document routes
router.include_router(documents.router)

# Collection statistics
router.include_router(stats.router)
