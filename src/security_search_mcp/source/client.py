"""
Document Source Clients

A document source returns the current article collection as a Snapshot.
Sources are external collaborators: the engine only relies on

    async fetch_documents() -> Snapshot

raising SourceUnavailable on any transport or storage failure.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional, Protocol

import httpx

from ..config import Settings, settings
from ..core.errors import InvalidInput, SourceUnavailable
from ..search.models import Snapshot

logger = logging.getLogger("search.source")


class DocumentSource(Protocol):
    async def fetch_documents(self) -> Snapshot:
        ...


class HttpDocumentSource:
    """Fetches the published metadata JSON from an object-storage URL."""

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.url = url or str(settings.document_source_url)
        self.timeout = timeout or settings.source_timeout_seconds

    async def fetch_documents(self) -> Snapshot:
        logger.info("Fetching article metadata from %s", self.url)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(self.url)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPError as exc:
            logger.error(
                "Metadata request failed (%s): %s",
                type(exc).__name__,
                str(exc),
            )
            raise SourceUnavailable(
                f"Failed to fetch article metadata: {type(exc).__name__}"
            ) from exc
        except ValueError as exc:
            raise SourceUnavailable(
                "Article metadata is not valid JSON."
            ) from exc

        return _to_snapshot(payload)


class FileDocumentSource:
    """Reads the metadata JSON from local disk."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = Path(path or settings.document_source_path)

    def _read(self) -> Any:
        with self.path.open("r", encoding="utf-8") as f:
            return json.load(f)

    async def fetch_documents(self) -> Snapshot:
        logger.info("Loading article metadata from %s", self.path)

        try:
            payload = await asyncio.to_thread(self._read)
        except (OSError, ValueError) as exc:
            raise SourceUnavailable(
                f"Failed to read article metadata: {type(exc).__name__}"
            ) from exc

        return _to_snapshot(payload)


class UnconfiguredDocumentSource:
    """Source used when data only arrives via push-load."""

    async def fetch_documents(self) -> Snapshot:
        raise SourceUnavailable(
            "No document source is configured and no data has been loaded."
        )


def _to_snapshot(payload: Any) -> Snapshot:
    try:
        snapshot = Snapshot.from_payload(payload)
    except InvalidInput as exc:
        raise SourceUnavailable(f"Malformed article metadata: {exc.message}") from exc

    logger.info("Parsed %d articles", len(snapshot))
    return snapshot


def build_document_source(config: Optional[Settings] = None) -> DocumentSource:
    """
    Select a document source from configuration.

    An object-storage URL wins over a local path; with neither configured the
    service waits for data to be pushed via /load-data.
    """
    config = config or settings

    if config.document_source_url:
        return HttpDocumentSource(
            url=str(config.document_source_url),
            timeout=config.source_timeout_seconds,
        )
    if config.document_source_path:
        return FileDocumentSource(config.document_source_path)

    logger.warning("No document source configured; waiting for /load-data")
    return UnconfiguredDocumentSource()
