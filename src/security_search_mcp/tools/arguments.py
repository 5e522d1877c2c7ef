"""
Tool Argument Models

Pydantic models for the arguments an LLM passes to each tool. Tool calls
arrive as loose JSON, so every handler validates its arguments here before
the engine sees them.

Date formats and search modes are left to the engine, which reports them as
``invalid_input`` with a remediation hint.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FieldValuesArgs(BaseModel):
    field: str = Field(..., min_length=1, validation_alias=AliasChoices("field", "field_name"))
    search_term: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class QueryArticlesArgs(BaseModel):
    # Bare string candidates are widened to lists by the engine.
    filters: Optional[Dict[str, Any]] = None
    since_date: Optional[str] = None
    limit: Optional[int] = None
    summary_mode: bool = True

    model_config = ConfigDict(extra="ignore")


class ArticleDetailsArgs(BaseModel):
    article_id: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="ignore")


class FullTextSearchArgs(BaseModel):
    query: str = Field(..., min_length=1)
    search_mode: str = "exact"
    filters: Optional[Dict[str, Any]] = None
    since_date: Optional[str] = None
    case_sensitive: bool = False
    whole_word: bool = False
    limit: Optional[int] = None
    highlight: bool = True

    model_config = ConfigDict(extra="ignore")
