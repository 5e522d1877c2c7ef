"""
API Models

Pydantic models for request validation on the REST and JSON-RPC routes.

Design Goals
------------
- Strong typing at the HTTP boundary
- Safe defaults (no shared mutable state)
- Date format and limit bounds validated before the engine runs
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


SINCE_DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"


# ---------------------------------------------------------------------
# Query Models
# ---------------------------------------------------------------------

class QueryArticlesRequest(BaseModel):
    """
    Structured article query.
    """
    filters: Dict[str, List[str]] = Field(default_factory=dict)
    since_date: Optional[str] = Field(default=None, pattern=SINCE_DATE_PATTERN)
    limit: int = Field(default=30, ge=1, le=1000)
    summary_mode: bool = True

    model_config = ConfigDict(extra="forbid")


class FullTextSearchRequest(BaseModel):
    """
    Ranked free-text search.
    """
    query: str = Field(..., min_length=1)
    search_mode: Literal["exact", "any_word", "all_words"] = "exact"
    filters: Dict[str, List[str]] = Field(default_factory=dict)
    since_date: Optional[str] = Field(default=None, pattern=SINCE_DATE_PATTERN)
    case_sensitive: bool = False
    whole_word: bool = False
    limit: int = Field(default=30, ge=1, le=1000)
    highlight: bool = True

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Data Loading
# ---------------------------------------------------------------------

class LoadDataResponse(BaseModel):
    status: Literal["ok"] = "ok"
    articles: int = Field(..., ge=0)

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# JSON-RPC (MCP) Models
# ---------------------------------------------------------------------

class JsonRpcRequest(BaseModel):
    """
    Single JSON-RPC 2.0 message from an MCP client.

    ``id`` is absent for notifications.
    """
    jsonrpc: Literal["2.0"] = "2.0"
    id: Optional[Union[int, str]] = None
    method: str = Field(..., min_length=1)
    params: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")


class JsonRpcError(BaseModel):
    code: int
    message: str

    model_config = ConfigDict(extra="forbid")


class JsonRpcResponse(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    id: Optional[Union[int, str]] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[JsonRpcError] = None

    model_config = ConfigDict(extra="forbid")
