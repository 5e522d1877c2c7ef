from functools import lru_cache

from ..config import settings
from ..search.cache import DocumentCache
from ..search.engine import SearchEngine
from ..source.client import build_document_source


@lru_cache
def get_document_cache() -> DocumentCache:
    return DocumentCache(
        build_document_source(settings),
        ttl_seconds=settings.cache_ttl_seconds,
    )


@lru_cache
def get_search_engine() -> SearchEngine:
    return SearchEngine(get_document_cache())
