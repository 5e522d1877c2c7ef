"""
Search Routes

Plain HTTP endpoints over the SearchEngine, one per tool. These are used by
clients that do not speak JSON-RPC and by operators checking the data.

SearchError subclasses raised by the engine are rendered by the global
handler in core/errors.py as ``{error, detail, hint}`` payloads.
"""

from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from .models import FullTextSearchRequest, QueryArticlesRequest
from ..search.engine import SearchEngine
from ..search.models import Document
from .dependencies import get_search_engine

router = APIRouter(tags=["search"])


@router.get(
    "/show_searchable_fields",
    summary="List searchable fields by category",
    status_code=status.HTTP_200_OK,
)
async def show_searchable_fields(
    engine: Annotated[SearchEngine, Depends(get_search_engine)],
) -> Dict[str, Any]:
    return await engine.list_fields()


@router.get(
    "/get_field_values/{field}",
    summary="Distinct values of a field with occurrence counts",
    status_code=status.HTTP_200_OK,
)
async def get_field_values(
    field: str,
    engine: Annotated[SearchEngine, Depends(get_search_engine)],
    search_term: Annotated[Optional[str], Query()] = None,
) -> Dict[str, Any]:
    return await engine.field_values(field, search_term)


@router.post(
    "/query_articles",
    summary="Structured article query, newest first",
    status_code=status.HTTP_200_OK,
)
async def query_articles(
    req: QueryArticlesRequest,
    engine: Annotated[SearchEngine, Depends(get_search_engine)],
) -> Dict[str, Any]:
    """
    Filter articles by exact field values and an optional start date.

    Unknown filter fields return an empty article list, not an error.
    """
    results = await engine.search(
        filters=req.filters,
        since_date=req.since_date,
        limit=req.limit,
        summary_mode=req.summary_mode,
    )
    articles: List[Dict[str, Any]] = [
        r.to_dict() if isinstance(r, Document) else r for r in results
    ]
    return {
        "metadata": {"total_results": len(articles), **req.model_dump()},
        "articles": articles,
    }


@router.get(
    "/get_article_details/{article_id:path}",
    summary="Full record of a single article",
    status_code=status.HTTP_200_OK,
)
async def get_article_details(
    article_id: str,
    engine: Annotated[SearchEngine, Depends(get_search_engine)],
) -> Dict[str, Any]:
    doc = await engine.get_details(article_id)
    return doc.to_dict()


@router.post(
    "/search_full_text",
    summary="Ranked free-text search with snippets",
    status_code=status.HTTP_200_OK,
)
async def search_full_text(
    req: FullTextSearchRequest,
    engine: Annotated[SearchEngine, Depends(get_search_engine)],
) -> Dict[str, Any]:
    return await engine.search_text(
        query=req.query,
        search_mode=req.search_mode,
        filters=req.filters,
        since_date=req.since_date,
        case_sensitive=req.case_sensitive,
        whole_word=req.whole_word,
        limit=req.limit,
        highlight=req.highlight,
    )
