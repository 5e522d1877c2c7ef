"""
Error Taxonomy and Global Error Handling

This module defines the exceptions raised by the search engine and the
application-wide exception handlers that turn them into HTTP responses.

Design Goals
------------
- Every engine failure carries a machine-readable code and a remediation hint
- Never leak internal exception details to clients
- Log full stack traces internally for debugging
- Keep the exception classes framework-agnostic (the tool layer reuses them)
"""

from __future__ import annotations

import logging
from typing import Dict, Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("search.errors")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class SearchError(RuntimeError):
    """Base exception for all search engine failures."""

    code: str = "search_error"
    status_code: int = 500
    default_hint: str = "Retry the request."

    def __init__(self, message: str, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint or self.default_hint

    def to_payload(self) -> Dict[str, Any]:
        return {
            "error": self.code,
            "detail": self.message,
            "hint": self.hint,
        }


class SourceUnavailable(SearchError):
    """Raised when the document source fails and no snapshot exists yet."""

    code = "source_unavailable"
    status_code = 503
    default_hint = (
        "The article collection could not be loaded. "
        "Try again shortly or load data via /load-data."
    )


class FieldNotFound(SearchError):
    """Raised when a field never appears on any document."""

    code = "field_not_found"
    status_code = 404
    default_hint = (
        "Run show_searchable_fields first to discover valid field names."
    )


class NotFound(SearchError):
    """Raised when an article detail lookup has no match."""

    code = "not_found"
    status_code = 404
    default_hint = (
        "Use an article_id returned by query_articles or search_full_text."
    )


class InvalidInput(SearchError):
    """Raised for malformed caller input (dates, payloads)."""

    code = "invalid_input"
    status_code = 400
    default_hint = "Dates must use the YYYY-MM-DD format."


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def search_error_handler(
    request: Request,
    exc: SearchError,
) -> JSONResponse:
    """
    Render a SearchError as a structured JSON payload.

    The payload always includes a remediation hint so that LLM clients can
    recover (e.g. by running field discovery first).
    """
    logger.info(
        "Search error on %s %s: %s (%s)",
        request.method,
        request.url.path,
        exc.code,
        exc.message,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_payload(),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Behavior
    --------
    - Logs the full exception stack trace for internal diagnostics.
    - Returns a generic 500 error to the client with no internal details.

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : Exception
        The uncaught exception instance.

    Returns
    -------
    JSONResponse
        A JSON 500 response with a minimal error payload.
    """

    # Log full traceback internally (never returned to client)
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }

    return JSONResponse(
        status_code=500,
        content=payload,
    )
