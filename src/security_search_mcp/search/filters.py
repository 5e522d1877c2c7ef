"""
Structured Filtering

Date gating, field filters, date ordering and summary projection used by
``query_articles`` and as the pre-filter of full-text search.

Filter semantics
----------------
- OR within a field's candidate list, AND across fields.
- ``cloud_platforms``: case-insensitive list membership.
- ``products_impacted``: case-insensitive substring of the joined list.
- ``summary`` / ``title`` / ``article_text_md_original``: case-insensitive
  substring containment.
- Every other field: exact, case-sensitive equality against the flattened
  values.
- A field no document carries matches nothing (empty result, not an error).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..core.errors import InvalidInput
from .models import UNDATED, Document, scalar_to_str


Filters = Mapping[str, Sequence[str]]

PLATFORM_FIELD = "cloud_platforms"
PRODUCT_FIELD = "products_impacted"
FREE_TEXT_FIELDS = frozenset({"summary", "title", "article_text_md_original"})

_SINCE_DATE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


# ---------------------------------------------------------------------
# Date gate
# ---------------------------------------------------------------------

def validate_since_date(since_date: Optional[str]) -> Optional[str]:
    """
    Raises
    ------
    InvalidInput
        If ``since_date`` is not ``YYYY-MM-DD``.
    """
    if since_date is None or since_date == "":
        return None
    if not isinstance(since_date, str) or not _SINCE_DATE.match(since_date):
        raise InvalidInput(f"Invalid since_date '{since_date}'; expected YYYY-MM-DD.")
    return since_date


@dataclass(frozen=True)
class DateGate:
    """
    Decides whether an article is dated on or after a cutoff.

    Articles whose date is missing, a known placeholder, or written with
    non-ASCII digit glyphs are excluded.
    """

    placeholders: Tuple[str, ...] = ("YYYYMMDD",)
    reject_non_ascii: bool = True

    def is_corrupt(self, raw: str) -> bool:
        if raw in self.placeholders:
            return True
        if self.reject_non_ascii:
            return any(ch.isdigit() and not ch.isascii() for ch in raw)
        return False

    def date_of(self, doc: Document) -> Optional[str]:
        """Date portion of the resolved date, or None if missing or corrupt."""
        raw = doc.raw_date
        if not raw or self.is_corrupt(raw):
            return None
        return raw.split(" ", 1)[0]

    def accepts(self, doc: Document, since_date: str) -> bool:
        date = self.date_of(doc)
        return date is not None and date >= since_date


# ---------------------------------------------------------------------
# Field filters
# ---------------------------------------------------------------------

def _match_platforms(doc: Document, candidates: Sequence[str]) -> bool:
    platforms = {scalar_to_str(v).lower() for v in doc.scalars(PLATFORM_FIELD)}
    return any(c.lower() in platforms for c in candidates)


def _match_products(doc: Document, candidates: Sequence[str]) -> bool:
    if not doc.scalars(PRODUCT_FIELD):
        return False
    text = doc.text(PRODUCT_FIELD).lower()
    return any(c.lower() in text for c in candidates)


def _match_free_text(doc: Document, field_name: str, candidates: Sequence[str]) -> bool:
    text = doc.text(field_name).lower()
    if not text:
        return False
    return any(c.lower() in text for c in candidates if c)


def _match_exact(doc: Document, field_name: str, candidates: Sequence[str]) -> bool:
    values = {scalar_to_str(v) for v in doc.scalars(field_name)}
    return any(c in values for c in candidates)


def matches_field(doc: Document, field_name: str, candidates: Sequence[str]) -> bool:
    if field_name == PLATFORM_FIELD:
        return _match_platforms(doc, candidates)
    if field_name == PRODUCT_FIELD:
        return _match_products(doc, candidates)
    if field_name in FREE_TEXT_FIELDS:
        return _match_free_text(doc, field_name, candidates)
    return _match_exact(doc, field_name, candidates)


def normalize_filters(filters: Optional[Filters]) -> Dict[str, List[str]]:
    """
    Coerce filter candidates to lists of strings and drop empty lists.

    A bare string candidate is treated as a one-element list.
    """
    if not filters:
        return {}
    if not isinstance(filters, Mapping):
        raise InvalidInput(
            "filters must be an object mapping field names to value arrays.",
            hint="Example: {\"severity_level\": [\"Critical\"]}",
        )

    normalized: Dict[str, List[str]] = {}
    for name, candidates in filters.items():
        if candidates is None:
            continue
        if isinstance(candidates, (str, int, float, bool)):
            candidates = [candidates]
        values = [scalar_to_str(c) for c in candidates if c is not None]
        if values:
            normalized[str(name)] = values
    return normalized


def matches_filters(doc: Document, filters: Mapping[str, Sequence[str]]) -> bool:
    return all(
        matches_field(doc, name, candidates)
        for name, candidates in filters.items()
    )


def apply_gates(
    documents: Iterable[Document],
    filters: Mapping[str, Sequence[str]],
    since_date: Optional[str],
    date_gate: DateGate,
) -> List[Document]:
    """Date gate first, then field filters; document order is preserved."""
    results = list(documents)
    if since_date:
        results = [d for d in results if date_gate.accepts(d, since_date)]
    if filters:
        results = [d for d in results if matches_filters(d, filters)]
    return results


def sort_newest_first(
    documents: Iterable[Document],
    date_gate: DateGate = DateGate(),
) -> List[Document]:
    """Newest first; undated and corrupt dates sort last as 0000-00-00."""
    return sorted(
        documents,
        key=lambda d: date_gate.date_of(d) or UNDATED,
        reverse=True,
    )


def clamp_limit(limit: Optional[int], default: int, ceiling: int) -> int:
    if limit is None:
        limit = default
    return max(0, min(int(limit), ceiling))


# ---------------------------------------------------------------------
# Summary projection
# ---------------------------------------------------------------------

def summarize(doc: Document) -> Dict[str, Any]:
    summary = doc.get("summary")
    if not summary and doc.get("description"):
        summary = doc.text("description")[:200]

    return {
        "article_id": doc.identifier or "",
        "title": doc.get("title") or "No title",
        "article_date": doc.raw_date or "Unknown date",
        "severity_level": doc.get("severity_level") or "Unknown",
        "summary": summary or None,
        "url": doc.get("url") or "No URL",
        "original_source_url": doc.get("original_source_url") or None,
    }
