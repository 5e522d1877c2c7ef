"""
LLM Tool Definitions

This module defines the authoritative tool/function schemas exposed to the LLM.
These definitions must remain strictly synchronized with:

- tools/base.py (TOOL_REGISTRY)
- The SearchEngine methods they front

Only tools defined here are listed to clients.
"""

from __future__ import annotations

from typing import Dict, List, Any, Final


# ---------------------------------------------------------------------
# Tool Name Constants (Single Source of Truth)
# ---------------------------------------------------------------------

TOOL_GET_WORKFLOW_INSTRUCTIONS: Final[str] = "get_workflow_instructions"
TOOL_SHOW_SEARCHABLE_FIELDS: Final[str] = "show_searchable_fields"
TOOL_GET_FIELD_VALUES: Final[str] = "get_field_values"
TOOL_SHOW_FIELD_VALUES: Final[str] = "show_field_values"
TOOL_QUERY_ARTICLES: Final[str] = "query_articles"
TOOL_GET_ARTICLE_DETAILS: Final[str] = "get_article_details"
TOOL_SEARCH_FULL_TEXT: Final[str] = "search_full_text"


_FIELD_VALUES_PARAMETERS: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "field": {
            "type": "string",
            "description": "The field name to get values for (from show_searchable_fields).",
            "minLength": 1,
        },
        "search_term": {
            "type": "string",
            "description": "Optional case-insensitive substring to narrow the values.",
        },
    },
    "required": ["field"],
    "additionalProperties": False,
}

_FILTERS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "description": (
        "Field-value pairs to filter by. Values must be arrays, even for a "
        "single value, e.g. {\"severity_level\": [\"Critical\"]}. "
        "Multiple values in one field are OR-ed; multiple fields are AND-ed."
    ),
    "additionalProperties": {"type": "array", "items": {"type": "string"}},
}

_SINCE_DATE_SCHEMA: Dict[str, Any] = {
    "type": "string",
    "description": "Only articles published on or after this date (YYYY-MM-DD).",
    "pattern": r"^\d{4}-\d{2}-\d{2}$",
}


# ---------------------------------------------------------------------
# Tool Definitions
# ---------------------------------------------------------------------

TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": TOOL_GET_WORKFLOW_INSTRUCTIONS,
            "description": (
                "START HERE - Get the correct workflow for searching security articles. "
                "Returns the mandatory 3-step process that prevents failed searches."
            ),
            "parameters": {
                "type": "object",
                "properties": {},
                "additionalProperties": False,
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": TOOL_SHOW_SEARCHABLE_FIELDS,
            "description": (
                "STEP 1: Discover the searchable fields, grouped by category, with "
                "example values and the dataset date range."
            ),
            "parameters": {
                "type": "object",
                "properties": {},
                "additionalProperties": False,
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": TOOL_GET_FIELD_VALUES,
            "description": (
                "STEP 2: Get the EXACT values (with counts) for a field you want to "
                "filter on. Values are case-sensitive; always use this before querying."
            ),
            "parameters": _FIELD_VALUES_PARAMETERS,
        },
    },
    {
        "type": "function",
        "function": {
            "name": TOOL_SHOW_FIELD_VALUES,
            "description": "Alias for get_field_values.",
            "parameters": _FIELD_VALUES_PARAMETERS,
        },
    },
    {
        "type": "function",
        "function": {
            "name": TOOL_QUERY_ARTICLES,
            "description": (
                "STEP 3: Search articles using exact values from step 2. "
                "Results are sorted newest first."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "filters": _FILTERS_SCHEMA,
                    "since_date": _SINCE_DATE_SCHEMA,
                    "limit": {
                        "type": "integer",
                        "description": "Maximum number of results (default 30).",
                        "minimum": 1,
                        "maximum": 1000,
                        "default": 30,
                    },
                    "summary_mode": {
                        "type": "boolean",
                        "description": "Return summaries only (default true).",
                        "default": True,
                    },
                },
                "additionalProperties": False,
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": TOOL_GET_ARTICLE_DETAILS,
            "description": (
                "Get the full record of one article by the article_id returned "
                "from query_articles or search_full_text."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "article_id": {
                        "type": "string",
                        "description": "The article ID (storage path, URL or title).",
                        "minLength": 1,
                    },
                },
                "required": ["article_id"],
                "additionalProperties": False,
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": TOOL_SEARCH_FULL_TEXT,
            "description": (
                "Free-text search across titles, summaries, article bodies and key "
                "list fields, ranked by relevance with highlighted snippets."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Words or phrase to search for.",
                        "minLength": 1,
                    },
                    "search_mode": {
                        "type": "string",
                        "enum": ["exact", "any_word", "all_words"],
                        "description": (
                            "exact: whole phrase; any_word: at least one word; "
                            "all_words: every word somewhere in the article."
                        ),
                        "default": "exact",
                    },
                    "filters": _FILTERS_SCHEMA,
                    "since_date": _SINCE_DATE_SCHEMA,
                    "case_sensitive": {"type": "boolean", "default": False},
                    "whole_word": {"type": "boolean", "default": False},
                    "limit": {
                        "type": "integer",
                        "minimum": 1,
                        "maximum": 1000,
                        "default": 30,
                    },
                    "highlight": {"type": "boolean", "default": True},
                },
                "required": ["query"],
                "additionalProperties": False,
            },
        },
    },
]


def mcp_tool_list() -> List[Dict[str, Any]]:
    """
    Render TOOL_DEFINITIONS in the MCP ``tools/list`` shape.
    """
    return [
        {
            "name": d["function"]["name"],
            "description": d["function"]["description"],
            "inputSchema": d["function"]["parameters"],
        }
        for d in TOOL_DEFINITIONS
    ]
