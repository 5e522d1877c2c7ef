"""
Document Cache

Holds the current Snapshot and its fetch time, and decides whether to reuse
it or pull a fresh one from the document source.

Design choices
--------------
- TTL-based freshness, measured with a monotonic clock (injectable for tests).
- Concurrent callers that observe a stale snapshot share a single in-flight
  refresh task, so the source sees one fetch per stale period.
- A failed refresh, whatever the source raised, falls back to the last good
  snapshot. Only when no snapshot has ever been loaded does
  SourceUnavailable reach the caller.
- The snapshot pointer is the only mutable state; snapshots themselves are
  immutable and shared by reference.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional

from ..core.errors import SourceUnavailable
from .models import Snapshot

logger = logging.getLogger("search.cache")


class DocumentCache:
    """
    TTL cache around a single Snapshot with coalesced refreshes.
    """

    def __init__(
        self,
        source: Any,
        ttl_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Parameters
        ----------
        source : DocumentSource
            Object exposing ``async fetch_documents() -> Snapshot``.

        ttl_seconds : float
            Age after which the cached snapshot is considered stale.

        clock : Callable[[], float]
            Time source in seconds.
        """
        self._source = source
        self._ttl = ttl_seconds
        self._clock = clock

        self._snapshot: Optional[Snapshot] = None
        self._fetched_at: Optional[float] = None
        self._refresh_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> Optional[Snapshot]:
        return self._snapshot

    def is_stale(self) -> bool:
        if self._snapshot is None or self._fetched_at is None:
            return True
        return (self._clock() - self._fetched_at) >= self._ttl

    def status(self) -> Dict[str, Any]:
        """Cache diagnostics for the health endpoint."""
        age = None
        if self._fetched_at is not None:
            age = round(self._clock() - self._fetched_at, 3)

        return {
            "cache": "loaded" if self._snapshot is not None else "empty",
            "articles": len(self._snapshot) if self._snapshot is not None else 0,
            "generated_at": self._snapshot.generated_at if self._snapshot else None,
            "age_seconds": age,
            "stale": self.is_stale(),
            "refreshing": self._refresh_task is not None,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_snapshot(self) -> Snapshot:
        """
        Return the current snapshot, refreshing it first if stale.

        Raises
        ------
        SourceUnavailable
            If the source fails and no previous snapshot exists.
        """
        if not self.is_stale():
            logger.debug("Using cached snapshot")
            return self._snapshot

        return await self.refresh()

    async def refresh(self) -> Snapshot:
        """
        Pull a fresh snapshot, joining any refresh already in flight.
        """
        if self._refresh_task is None:
            self._refresh_task = asyncio.ensure_future(self._run_refresh())

        # Shield so one cancelled caller does not cancel the shared fetch.
        return await asyncio.shield(self._refresh_task)

    def load(self, snapshot: Snapshot) -> None:
        """
        Replace the cached snapshot directly (push-load).
        """
        self._snapshot = snapshot
        self._fetched_at = self._clock()
        logger.info("Loaded %d articles into cache", len(snapshot))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run_refresh(self) -> Snapshot:
        try:
            logger.info("Refreshing snapshot from document source")
            try:
                snapshot = await self._source.fetch_documents()
            except SourceUnavailable as exc:
                if self._snapshot is not None:
                    logger.warning(
                        "Refresh failed, serving stale snapshot: %s",
                        exc.message,
                    )
                    return self._snapshot
                raise
            except Exception as exc:
                logger.exception("Document source raised unexpectedly")
                if self._snapshot is not None:
                    return self._snapshot
                raise SourceUnavailable(
                    f"Document source failed: {type(exc).__name__}"
                ) from exc

            self.load(snapshot)
            return snapshot
        finally:
            self._refresh_task = None
