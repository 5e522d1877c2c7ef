"""
Workflow Instructions

Static guidance returned by ``get_workflow_instructions``. Filter values are
matched exactly, so clients must discover fields and values before querying;
an unknown field or guessed value silently returns no articles.
"""

from __future__ import annotations

from typing import Any, Dict


WORKFLOW_INSTRUCTIONS: Dict[str, Any] = {
    "workflow": "MANDATORY 3-STEP WORKFLOW - DO NOT SKIP",
    "steps": [
        {
            "step": 1,
            "tool": "show_searchable_fields()",
            "purpose": "Discover available fields and categories",
            "required": True,
        },
        {
            "step": 2,
            "tool": "get_field_values('field_name')",
            "purpose": "Get EXACT values for any field you want to filter on",
            "note": "Case-sensitive! Use exact strings returned",
            "required": True,
        },
        {
            "step": 3,
            "tool": "query_articles(filters={...})",
            "purpose": "Use exact values from step 2",
            "example": '{"severity_level": ["Critical"], "cloud_platforms": ["AWS"]}',
            "note": "Filter values MUST be arrays, even for single values",
            "required": True,
        },
    ],
    "alternative": {
        "tool": "search_full_text(query='...')",
        "purpose": "Free-text search when no structured field fits the question",
    },
    "critical_warning": (
        "Guessing field names or values returns zero results without an error. "
        "Always use step 2 to get exact values."
    ),
    "example_sequence": {
        "user_request": "Find critical AWS ransomware issues",
        "assistant_actions": [
            "1. show_searchable_fields() -> see all fields",
            "2. get_field_values('severity_level') -> ['Critical', 'High', ...]",
            "3. get_field_values('cloud_platforms') -> ['AWS', 'Azure', ...]",
            "4. get_field_values('threat_types') -> ['Ransomware', 'Malware', ...]",
            "5. query_articles(filters={'severity_level': ['Critical'], "
            "'cloud_platforms': ['AWS'], 'threat_types': ['Ransomware']})",
        ],
    },
    "common_mistakes": [
        "Skipping step 1 - unknown field names match nothing",
        "Guessing values instead of using step 2 - leads to no results",
        "Wrong case - 'critical' vs 'Critical'",
        "Passing a string instead of an array - 'AI' vs ['AI']",
        "Using non-existent parameters - only filters, since_date, limit, summary_mode",
    ],
    "next_step": "Run show_searchable_fields() to begin",
}


def get_workflow_instructions() -> Dict[str, Any]:
    return WORKFLOW_INSTRUCTIONS
