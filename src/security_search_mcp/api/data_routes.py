"""
Data Loading Routes

Lets an upstream loader push the article metadata directly into the cache,
for deployments where this service cannot reach object storage itself.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, status

from .models import LoadDataResponse
from ..search.cache import DocumentCache
from ..search.models import Snapshot
from .dependencies import get_document_cache

router = APIRouter(tags=["data"])


@router.post(
    "/load-data",
    response_model=LoadDataResponse,
    summary="Replace the cached article snapshot",
    status_code=status.HTTP_200_OK,
)
async def load_data(
    payload: Annotated[Any, Body()],
    cache: Annotated[DocumentCache, Depends(get_document_cache)],
) -> LoadDataResponse:
    """
    Accepts the published metadata object (with an ``articles`` array) or a
    bare list of articles. Malformed payloads are rejected with 400.
    """
    snapshot = Snapshot.from_payload(payload)
    cache.load(snapshot)
    return LoadDataResponse(articles=len(snapshot))
