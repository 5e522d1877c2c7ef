from fastapi import APIRouter, Depends

from ..search.cache import DocumentCache
from .dependencies import get_document_cache

router = APIRouter(tags=["health"])

@router.get("/health")
def health(cache: DocumentCache = Depends(get_document_cache)):
    return {"status": "ok", **cache.status()}
