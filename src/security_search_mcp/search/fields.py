"""
Field Discovery

Schema discovery and per-field value enumeration over a snapshot. Both are
computed on demand; nothing here is cached between calls.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence

from ..core.errors import FieldNotFound
from .models import Document, Snapshot, scalar_to_str


FIELD_CATEGORIES: Dict[str, List[str]] = {
    "content_summary": ["summary", "article_text_md_original", "ciso_summary_key_points"],
    "threat_intelligence": [
        "threat_types",
        "threat_actor_name",
        "severity_level",
        "cve_identifiers",
        "related_incidents",
    ],
    "cloud_technology": ["cloud_platforms", "products_impacted"],
    "business_context": ["sectors", "regions", "affected_organizations", "article_type"],
    "temporal": ["title", "article_date", "date_original"],
    "sources": ["original_source_name", "original_source_url"],
}

FIELD_DESCRIPTIONS: Dict[str, str] = {
    "summary": "Article summary for quick understanding",
    "article_text_md_original": "Full markdown text of the article",
    "ciso_summary_key_points": "Executive-level key points",
    "threat_types": "Types of security threats",
    "threat_actor_name": "Named threat actors or groups",
    "severity_level": "Severity classification of the threat",
    "cve_identifiers": "CVE identifiers referenced",
    "related_incidents": "Links to related security incidents",
    "cloud_platforms": "Cloud platforms affected",
    "products_impacted": "Products or services impacted",
    "sectors": "Industry sectors affected",
    "regions": "Geographic regions impacted",
    "affected_organizations": "Organizations mentioned",
    "article_type": "Classification of article type",
    "title": "Article title",
    "article_date": "Publication date",
    "date_original": "Original publication date",
    "original_source_name": "Original source name",
    "original_source_url": "Original source URL",
}

MAX_EXAMPLES = 3

_DATED = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}")


def describe_field(field: str) -> str:
    return FIELD_DESCRIPTIONS.get(field, f"Field: {field}")


def date_range(snapshot: Snapshot) -> str:
    """``"<earliest> to <latest>"`` over resolved dates, or ``"Unknown"``."""
    dates = sorted(
        d for d in (doc.raw_date for doc in snapshot.documents)
        if d and _DATED.match(d)
    )
    if not dates:
        return "Unknown"
    return f"{dates[0]} to {dates[-1]}"


def list_fields(snapshot: Snapshot, sample_size: int = 100) -> Dict[str, Any]:
    """
    Describe the searchable fields, grouped by category.

    Only the first ``sample_size`` documents are inspected for examples so
    that latency stays flat on large collections.
    """
    index = build_field_index(snapshot.documents[:sample_size])

    fields: List[Dict[str, Any]] = []
    categorized = set()
    for category, names in FIELD_CATEGORIES.items():
        for name in names:
            categorized.add(name)
            values = index.get(name)
            if not values:
                continue

            fields.append({
                "field": name,
                "type": category,
                "description": describe_field(name),
                "examples": values[:MAX_EXAMPLES],
                "total_unique_values": len(values),
            })

    return {
        "total_fields": len(fields),
        "dataset_info": {
            "total_articles": snapshot.total_articles,
            "date_range": date_range(snapshot),
            "last_update": snapshot.last_update,
        },
        "field_categories": FIELD_CATEGORIES,
        "fields": fields,
        "uncategorized_fields": sorted(f for f in index if f not in categorized),
    }


def build_field_index(documents: Sequence[Document]) -> Dict[str, List[str]]:
    """
    Map every field to its sorted, deduplicated scalar values.

    Null and empty-string values are ignored; sequences are flattened.
    """
    index: Dict[str, set] = {}
    for doc in documents:
        for field in doc:
            values = index.setdefault(field, set())
            for value in doc.scalars(field):
                text = scalar_to_str(value)
                if text:
                    values.add(text)
    return {field: sorted(values) for field, values in index.items()}


def field_values(
    snapshot: Snapshot,
    field_name: str,
    search_term: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Count every value of ``field_name`` across the whole snapshot.

    Sequence fields contribute one count per element. The optional
    ``search_term`` keeps values containing it (case-insensitive).

    Raises
    ------
    FieldNotFound
        If no document carries the field key at all.
    """
    counts: Counter = Counter()
    found = False

    for doc in snapshot.documents:
        if field_name not in doc:
            continue
        found = True
        for value in doc.scalars(field_name):
            text = scalar_to_str(value)
            if text:
                counts[text] += 1

    if not found:
        raise FieldNotFound(f"Field '{field_name}' not found")

    items = list(counts.items())
    if search_term:
        term = search_term.lower()
        items = [(value, n) for value, n in items if term in value.lower()]

    items.sort(key=lambda item: (-item[1], item[0]))

    return {
        "field_name": field_name,
        "metadata": {
            "total_unique_values": len(counts),
            "filter_applied": search_term or None,
            "total_values_after_filter": len(items),
        },
        "values_with_counts": dict(items),
        "total_values": len(items),
    }
