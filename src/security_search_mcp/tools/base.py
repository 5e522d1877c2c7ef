"""
Tool Dispatch Layer

This module defines the central, authoritative dispatch mechanism for all
LLM-invoked tool calls. It enforces:

- Explicit tool allow-listing
- Argument validation
- Dependency injection of the SearchEngine for testability
- Uniform error payloads for the LLM tool loop

No tool is callable unless it is registered in TOOL_REGISTRY.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Tuple

from pydantic import ValidationError

from ..core.errors import SearchError
from ..search.engine import SearchEngine
from ..search.models import Document
from . import definitions as d
from .arguments import (
    ArticleDetailsArgs,
    FieldValuesArgs,
    FullTextSearchArgs,
    QueryArticlesArgs,
)
from .workflow import get_workflow_instructions

logger = logging.getLogger("search.tools")


# ---------------------------------------------------------------------
# Tool Type Definitions
# ---------------------------------------------------------------------

ToolHandler = Callable[[Dict[str, Any], SearchEngine], Awaitable[Any]]


# ---------------------------------------------------------------------
# Tool Registry (AUTHORITATIVE)
# ---------------------------------------------------------------------

async def _handle_workflow(args: Dict[str, Any], engine: SearchEngine) -> Any:
    return get_workflow_instructions()


async def _handle_show_fields(args: Dict[str, Any], engine: SearchEngine) -> Any:
    return await engine.list_fields()


async def _handle_field_values(args: Dict[str, Any], engine: SearchEngine) -> Any:
    params = FieldValuesArgs.model_validate(args)
    return await engine.field_values(params.field, params.search_term)


async def _handle_query_articles(args: Dict[str, Any], engine: SearchEngine) -> Any:
    params = QueryArticlesArgs.model_validate(args)
    filters = params.filters or {}
    results = await engine.search(
        filters=filters,
        since_date=params.since_date,
        limit=params.limit,
        summary_mode=params.summary_mode,
    )
    articles = [r.to_dict() if isinstance(r, Document) else r for r in results]
    return {
        "metadata": {
            "total_results": len(articles),
            "filters": filters,
            "since_date": params.since_date,
        },
        "articles": articles,
    }


async def _handle_article_details(args: Dict[str, Any], engine: SearchEngine) -> Any:
    params = ArticleDetailsArgs.model_validate(args)
    doc = await engine.get_details(params.article_id)
    return doc.to_dict()


async def _handle_search_full_text(args: Dict[str, Any], engine: SearchEngine) -> Any:
    params = FullTextSearchArgs.model_validate(args)
    return await engine.search_text(
        query=params.query,
        search_mode=params.search_mode,
        filters=params.filters,
        since_date=params.since_date,
        case_sensitive=params.case_sensitive,
        whole_word=params.whole_word,
        limit=params.limit,
        highlight=params.highlight,
    )


TOOL_REGISTRY: Dict[str, ToolHandler] = {
    d.TOOL_GET_WORKFLOW_INSTRUCTIONS: _handle_workflow,
    d.TOOL_SHOW_SEARCHABLE_FIELDS: _handle_show_fields,
    d.TOOL_GET_FIELD_VALUES: _handle_field_values,
    d.TOOL_SHOW_FIELD_VALUES: _handle_field_values,
    d.TOOL_QUERY_ARTICLES: _handle_query_articles,
    d.TOOL_GET_ARTICLE_DETAILS: _handle_article_details,
    d.TOOL_SEARCH_FULL_TEXT: _handle_search_full_text,
}


# ---------------------------------------------------------------------
# Public Dispatch API
# ---------------------------------------------------------------------

async def dispatch_tool_call(
    tool_name: str,
    args: Dict[str, Any],
    engine: SearchEngine,
) -> Any:
    """
    Dispatch a tool call requested by the LLM.

    Parameters
    ----------
    tool_name : str
        The symbolic tool name requested by the LLM.

    args : Dict[str, Any]
        Parsed JSON arguments for the tool.

    engine : SearchEngine
        Active search engine (injected).

    Returns
    -------
    Any
        Tool execution result.

    Raises
    ------
    ValueError
        If the tool name is unknown.

    ValidationError
        If the arguments are missing or have the wrong types.

    SearchError
        Propagated from the engine.
    """
    handler = TOOL_REGISTRY.get(tool_name)
    if not handler:
        raise ValueError(f"Unknown tool requested: {tool_name}")

    return await handler(args or {}, engine)


async def run_tool(
    tool_name: str,
    args: Dict[str, Any],
    engine: SearchEngine,
) -> Tuple[Any, bool]:
    """
    Execute a tool and never raise for expected failures.

    Returns
    -------
    Tuple[Any, bool]
        ``(payload, is_error)``. Failures become ``{error, detail, hint}``
        payloads because the tool-call protocol always expects content.
    """
    try:
        return await dispatch_tool_call(tool_name, args, engine), False
    except SearchError as exc:
        logger.info("Tool %s failed: %s", tool_name, exc.message)
        return exc.to_payload(), True
    except ValidationError as exc:
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
            for err in exc.errors()
        )
        logger.info("Tool %s rejected arguments: %s", tool_name, detail)
        return {
            "error": "invalid_arguments",
            "detail": f"{tool_name}: {detail}",
            "hint": "Check the tool's input schema via tools/list or get_workflow_instructions.",
        }, True
    except ValueError as exc:
        logger.info("Tool %s rejected arguments: %s", tool_name, exc)
        return {
            "error": "invalid_arguments",
            "detail": str(exc),
            "hint": "Call get_workflow_instructions to see the tools and their arguments.",
        }, True
