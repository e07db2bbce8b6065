# taskgrid_host/http_app.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from taskgrid.config import Settings
from taskgrid.di import build_container
from taskgrid.errors import SandboxError

from taskgrid_host.registry import build_tool_registry, list_tools_payload, dispatch_tool_call

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2025-03-26"  # aligns with current spec draft dates


def _jsonrpc_error(id_: Any, code: int, message: str, data: Any | None = None) -> JSONResponse:
    body: Dict[str, Any] = {"jsonrpc": "2.0", "id": id_, "error": {"code": code, "message": message}}
    if data is not None:
        body["error"]["data"] = data
    return JSONResponse(body)

def _jsonrpc_result(id_: Any, result: Any) -> JSONResponse:
    return JSONResponse({"jsonrpc": "2.0", "id": id_, "result": result})


def _content_block(result: Any) -> Dict[str, Any]:
    if result is None:
        return {"type": "text", "text": "null"}
    if isinstance(result, (dict, list)):
        return {"type": "json", "json": result}
    if isinstance(result, bool):
        return {"type": "text", "text": "true" if result else "false"}
    return {"type": "text", "text": str(result)}


def create_http_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    container = build_container(settings)
    registry = build_tool_registry(container)

    app = FastAPI(title="Taskgrid Sandbox MCP", version="0.1.0")

    # ---------- Security: Origin validation & Bearer token ----------

    def _origin_allowed(req: Request) -> bool:
        origin = req.headers.get("origin")
        if not origin:
            return settings.MCP_HTTP_ALLOW_NO_ORIGIN
        allowed = {o.strip().lower() for o in settings.MCP_HTTP_ALLOWED_ORIGINS.split(",") if o.strip()}
        return origin.lower() in allowed

    def _require_auth(req: Request):
        auth = req.headers.get("authorization", "")
        if not auth.startswith("Bearer "):
            raise HTTPException(status_code=401, detail="Missing Bearer token")
        token = auth.split(" ", 1)[1]
        if token != settings.MCP_HTTP_BEARER_TOKEN:
            raise HTTPException(status_code=401, detail="Invalid Bearer token")

    @app.middleware("http")
    async def origin_validation_mw(request: Request, call_next):
        # Origin validation prevents DNS rebinding from a browser page
        if not _origin_allowed(request):
            return JSONResponse({"error": {"code": 403, "message": "Forbidden origin"}}, status_code=403)
        return await call_next(request)

    # ---------- MCP JSON-RPC endpoint (Streamable HTTP) ----------

    @app.post(settings.MCP_HTTP_PATH)
    async def mcp_endpoint(request: Request):
        _require_auth(request)

        try:
            payload = await request.json()
        except ValueError:
            return _jsonrpc_error(None, -32700, "Parse error")
        if not isinstance(payload, dict):
            return _jsonrpc_error(None, -32600, "Invalid Request")

        id_ = payload.get("id")
        method = payload.get("method")
        params = payload.get("params") or {}
        if not isinstance(params, dict):
            return _jsonrpc_error(id_, -32602, "Invalid params")

        if method == "initialize":
            return _jsonrpc_result(id_, {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {"listChanged": False}},
                "serverInfo": {"name": settings.SERVER_NAME, "version": "0.1.0"},
            })

        if method == "tools/list":
            return _jsonrpc_result(id_, list_tools_payload(registry))

        if method == "tools/call":
            name = params.get("name")
            args = params.get("arguments") or {}
            try:
                result = dispatch_tool_call(registry, name, args)
            except KeyError as ke:
                return _jsonrpc_error(id_, -32601, str(ke))
            except ValidationError as ve:
                return _jsonrpc_error(id_, -32602, "Invalid params", ve.errors(include_url=False, include_context=False))
            except SandboxError as se:
                # Tool-level failure: reported in the result, not as a protocol error
                return _jsonrpc_result(id_, {
                    "content": [{"type": "text", "text": se.message}],
                    "isError": True,
                    "_meta": {"errorKind": se.kind.value},
                })
            except Exception as e:
                logger.exception("tool_call_failed %s", name)
                return _jsonrpc_error(id_, -32603, "Internal error", str(e))

            return _jsonrpc_result(id_, {"content": [_content_block(result)], "isError": False})

        return _jsonrpc_error(id_, -32601, f"Method not found: {method}")

    return app


if __name__ == "__main__":
    import uvicorn
    from taskgrid.logging import configure_logging

    settings = Settings()
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        create_http_app(settings),
        host=settings.MCP_HTTP_HOST,
        port=settings.MCP_HTTP_PORT,
        reload=False,
    )
