"""
Search Engine

Answers the five query types over the current snapshot:

- list_fields       schema discovery (sampled)
- field_values      value enumeration with counts (full scan)
- search            structured filtering, newest first
- get_details       single article lookup by resolved identifier
- search_text       ranked full-text search

Each call fetches the snapshot from the DocumentCache and computes over it
without mutating anything; derived indexes live only for the call.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..config import settings
from ..core.errors import NotFound
from .cache import DocumentCache
from .fields import field_values as _field_values
from .fields import list_fields as _list_fields
from .filters import (
    DateGate,
    apply_gates,
    clamp_limit,
    normalize_filters,
    sort_newest_first,
    summarize,
    validate_since_date,
)
from .fulltext import search_text as _search_text
from .models import IDENTIFIER_FIELDS, LOCATOR_FIELD, Document, Snapshot

logger = logging.getLogger("search.engine")


class SearchEngine:
    """
    Query facade over a DocumentCache.
    """

    def __init__(
        self,
        cache: DocumentCache,
        max_limit: Optional[int] = None,
        default_limit: Optional[int] = None,
        sample_size: Optional[int] = None,
        snippet_window: Optional[int] = None,
        date_gate: Optional[DateGate] = None,
    ) -> None:
        self.cache = cache
        self.max_limit = max_limit or settings.max_query_limit
        self.default_limit = default_limit or settings.default_query_limit
        self.sample_size = sample_size or settings.schema_sample_size
        self.snippet_window = snippet_window or settings.snippet_window
        self.date_gate = date_gate or DateGate(
            placeholders=tuple(settings.date_placeholders),
            reject_non_ascii=settings.reject_non_ascii_dates,
        )

    async def _snapshot(self) -> Snapshot:
        return await self.cache.get_snapshot()

    # ------------------------------------------------------------------
    # Field discovery
    # ------------------------------------------------------------------

    async def list_fields(self) -> Dict[str, Any]:
        snapshot = await self._snapshot()
        return _list_fields(snapshot, sample_size=self.sample_size)

    async def field_values(
        self,
        field_name: str,
        search_term: Optional[str] = None,
    ) -> Dict[str, Any]:
        snapshot = await self._snapshot()
        return _field_values(snapshot, field_name, search_term)

    # ------------------------------------------------------------------
    # Structured query
    # ------------------------------------------------------------------

    async def search(
        self,
        filters: Optional[Mapping[str, Sequence[str]]] = None,
        since_date: Optional[str] = None,
        limit: Optional[int] = None,
        summary_mode: bool = True,
    ) -> List[Union[Dict[str, Any], Document]]:
        """
        Filter, sort newest first, truncate and optionally summarize.

        Unknown filter fields yield an empty list rather than an error.

        Raises
        ------
        InvalidInput
            If ``since_date`` is not ``YYYY-MM-DD``.
        """
        since_date = validate_since_date(since_date)
        normalized = normalize_filters(filters)
        limit = clamp_limit(limit, self.default_limit, self.max_limit)

        snapshot = await self._snapshot()
        results = apply_gates(snapshot.documents, normalized, since_date, self.date_gate)
        results = sort_newest_first(results, self.date_gate)[:limit]

        logger.debug(
            "query_articles filters=%s since=%s -> %d results",
            list(normalized),
            since_date,
            len(results),
        )

        if summary_mode:
            return [summarize(doc) for doc in results]
        return results

    # ------------------------------------------------------------------
    # Detail lookup
    # ------------------------------------------------------------------

    async def get_details(self, identifier: str) -> Document:
        """
        Find an article by resolved identifier.

        Exact matches on locator, url or title win; otherwise the first
        article whose locator or url contains ``identifier`` is returned.

        Raises
        ------
        NotFound
            If nothing matches.
        """
        if not identifier:
            raise NotFound("Article not found: ''")

        snapshot = await self._snapshot()

        for doc in snapshot.documents:
            if any(doc.get(f) == identifier for f in IDENTIFIER_FIELDS):
                return doc

        for doc in snapshot.documents:
            for f in (LOCATOR_FIELD, "url"):
                value = doc.get(f)
                if isinstance(value, str) and identifier in value:
                    return doc

        raise NotFound(f"Article not found: {identifier}")

    # ------------------------------------------------------------------
    # Full-text search
    # ------------------------------------------------------------------

    async def search_text(
        self,
        query: str,
        search_mode: str = "exact",
        filters: Optional[Mapping[str, Sequence[str]]] = None,
        since_date: Optional[str] = None,
        case_sensitive: bool = False,
        whole_word: bool = False,
        limit: Optional[int] = None,
        highlight: bool = True,
    ) -> Dict[str, Any]:
        since_date = validate_since_date(since_date)
        normalized = normalize_filters(filters)
        limit = clamp_limit(limit, self.default_limit, self.max_limit)

        snapshot = await self._snapshot()
        response = _search_text(
            snapshot.documents,
            query,
            search_mode=search_mode,
            filters=normalized,
            since_date=since_date,
            case_sensitive=case_sensitive,
            whole_word=whole_word,
            limit=limit,
            highlight=highlight,
            date_gate=self.date_gate,
            snippet_window=self.snippet_window,
        )

        logger.debug(
            "search_full_text query=%r mode=%s -> %d results",
            query,
            search_mode,
            response["total_results"],
        )
        return response
