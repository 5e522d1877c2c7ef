"""
MCP Routes: JSON-RPC Tool Interface

This module exposes the tool surface to MCP clients over a single
JSON-RPC 2.0 endpoint. It handles:

1. ``initialize``: protocol handshake and server info.
2. ``tools/list``: the authoritative tool definitions.
3. ``tools/call``: dispatch through tools/base.py; results and tool failures
   are both returned as text content so the LLM always gets a payload.
4. ``notifications/*``: acknowledged with 202 and no body.

Streaming transports are not implemented; each request gets one response.
"""

import json
import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, Response, status

from .models import JsonRpcError, JsonRpcRequest, JsonRpcResponse
from ..search.engine import SearchEngine
from ..tools.base import run_tool
from ..tools.definitions import mcp_tool_list
from .dependencies import get_search_engine

logger = logging.getLogger("search.mcp")

router = APIRouter(tags=["mcp"])

PROTOCOL_VERSION = "2025-06-18"
SERVER_INFO = {"name": "security-search", "version": "1.0.0"}

METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


def _text_content(payload: Any, is_error: bool) -> Dict[str, Any]:
    return {
        "content": [
            {
                "type": "text",
                "text": json.dumps(payload, indent=2, default=str, ensure_ascii=False),
            }
        ],
        "isError": is_error,
    }


@router.post(
    "/mcp",
    response_model=JsonRpcResponse,
    response_model_exclude_none=True,
    summary="MCP JSON-RPC endpoint",
    status_code=status.HTTP_200_OK,
)
async def mcp(
    req: JsonRpcRequest,
    engine: Annotated[SearchEngine, Depends(get_search_engine)],
):
    if req.method.startswith("notifications/"):
        return Response(status_code=status.HTTP_202_ACCEPTED)

    if req.method == "initialize":
        return JsonRpcResponse(
            id=req.id,
            result={
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": SERVER_INFO,
            },
        )

    if req.method == "tools/list":
        return JsonRpcResponse(id=req.id, result={"tools": mcp_tool_list()})

    if req.method == "tools/call":
        name = req.params.get("name")
        args = req.params.get("arguments") or {}
        if not name or not isinstance(args, dict):
            return JsonRpcResponse(
                id=req.id,
                error=JsonRpcError(
                    code=INVALID_PARAMS,
                    message="tools/call requires 'name' and object 'arguments'.",
                ),
            )

        logger.info("Tool call: %s", name)
        payload, is_error = await run_tool(name, args, engine)
        return JsonRpcResponse(id=req.id, result=_text_content(payload, is_error))

    return JsonRpcResponse(
        id=req.id,
        error=JsonRpcError(code=METHOD_NOT_FOUND, message=f"Unknown method: {req.method}"),
    )
