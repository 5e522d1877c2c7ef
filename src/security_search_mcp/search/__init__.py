"""
Search Package

In-memory article search: immutable snapshots, the TTL document cache and
the query engine built on top of it.
"""

from .models import Document, Snapshot
from .cache import DocumentCache
from .engine import SearchEngine

__all__ = [
    "Document",
    "Snapshot",
    "DocumentCache",
    "SearchEngine",
]
