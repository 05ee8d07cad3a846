"""HTTP transport — aiohttp application returning unsigned transactions for writes."""
from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any

from aiohttp import web

from .. import __version__
from ..config import AppConfig
from ..models import (
    Capabilities,
    Failure,
    FailureKind,
    Outcome,
    Success,
    TargetGroup,
    UnsignedTransaction,
)
from ..operations import CATALOGUE, list_operations, lookup
from ..services import DispatchEngine
from .formatting import outcome_json, transaction_json

logger = logging.getLogger(__name__)

# Writes are never signed here; callers receive calldata to sign themselves.
CAPABILITIES = Capabilities(can_submit=False)

MAX_BODY_BYTES = 10 * 1024 * 1024
HEARTBEAT_SECONDS = 30.0

HTTP_STATUS: dict[FailureKind, int] = {
    FailureKind.UNKNOWN_OPERATION: 400,
    FailureKind.INVALID_ARGUMENTS: 400,
    FailureKind.UNRESOLVED_TARGET: 400,
    FailureKind.UNSUPPORTED_CHAIN: 400,
    FailureKind.CHAIN_CALL_FAILED: 502,
    FailureKind.UNCLASSIFIED: 500,
    FailureKind.INTERNAL: 500,
}

ENGINE_KEY = web.AppKey("engine", DispatchEngine)
CONFIG_KEY = web.AppKey("config", AppConfig)
HEARTBEAT_KEY = web.AppKey("heartbeat", float)

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _status(outcome: Outcome) -> int:
    if isinstance(outcome, Failure):
        return HTTP_STATUS.get(outcome.kind, 500)
    return 200


def _error(message: str, status: int = 400) -> web.Response:
    return web.json_response({"success": False, "error": message}, status=status)


async def _read_json(request: web.Request) -> dict[str, Any] | None:
    try:
        body = await request.json()
    # Covers both malformed JSON and bodies that are not valid text.
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


@web.middleware
async def log_requests(request: web.Request, handler: Any) -> web.StreamResponse:
    logger.info("%s %s", request.method, request.path)
    return await handler(request)


@web.middleware
async def cors(request: web.Request, handler: Any) -> web.StreamResponse:
    if request.method == "OPTIONS":
        response: web.StreamResponse = web.Response(status=204)
    else:
        response = await handler(request)
    if not response.prepared:
        response.headers.update(_CORS_HEADERS)
    return response


@web.middleware
async def internal_errors(request: web.Request, handler: Any) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return _error("Internal server error", status=500)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def index(request: web.Request) -> web.Response:
    engine = request.app[ENGINE_KEY]
    return web.json_response(
        {
            "name": "Unlock MCP Proxy Server",
            "version": __version__,
            "description": "Model Context Protocol server for Unlock Protocol on Base networks",
            "endpoints": {
                "GET /": "This documentation",
                "GET /health": "Health check",
                "GET /tools": "List available MCP tools",
                "POST /tools/call": "Execute MCP tool",
                "GET /sse": "Server-Sent Events endpoint",
                "POST /unlock/{method}": "Legacy Unlock contract methods",
                "POST /lock/{method}": "Legacy PublicLock contract methods",
            },
            "supportedChains": engine.supported_chains,
            "toolsCount": len(CATALOGUE),
        }
    )


async def health(request: web.Request) -> web.Response:
    config = request.app[CONFIG_KEY]
    engine = request.app[ENGINE_KEY]
    return web.json_response(
        {
            "status": "healthy",
            "timestamp": _now(),
            "version": __version__,
            "tools": len(CATALOGUE),
            "supportedChains": engine.supported_chains,
            "unlockAddress": config.unlock_address,
            "defaultLockAddress": config.lock_address or None,
        }
    )


async def list_tools(request: web.Request) -> web.Response:
    return web.json_response({"tools": list_operations()})


async def call_tool(request: web.Request) -> web.Response:
    body = await _read_json(request)
    if body is None:
        return _error("Request body must be a JSON object")

    name = body.get("name")
    args = body.get("arguments")
    if not isinstance(name, str) or not name or args is None:
        return _error("Missing name or arguments")

    outcome = await request.app[ENGINE_KEY].dispatch(name, args, CAPABILITIES)
    return web.json_response(outcome_json(outcome), status=_status(outcome))


async def _legacy_call(
    request: web.Request, group: TargetGroup, arguments: dict[str, Any]
) -> web.Response:
    method = request.match_info["method"]
    descriptor = lookup(method)
    if descriptor is not None and descriptor.target is not group:
        contract = "an Unlock" if group is TargetGroup.FACTORY else "a PublicLock"
        return web.json_response(
            {"error": f"{method} is not {contract} contract method"}, status=400
        )

    outcome = await request.app[ENGINE_KEY].dispatch(method, arguments, CAPABILITIES)
    if isinstance(outcome, Failure):
        return web.json_response({"error": outcome.message}, status=_status(outcome))
    if isinstance(outcome, Success) and isinstance(outcome.payload, UnsignedTransaction):
        return web.json_response(transaction_json(outcome.payload))
    return web.json_response(outcome_json(outcome))


async def legacy_unlock(request: web.Request) -> web.Response:
    body = await _read_json(request) or {}
    chain_id = body.get("chainId")
    args = body.get("args")
    if not chain_id or not isinstance(args, dict):
        return web.json_response({"error": "Missing chainId or args"}, status=400)
    return await _legacy_call(request, TargetGroup.FACTORY, {"chainId": chain_id, **args})


async def legacy_lock(request: web.Request) -> web.Response:
    body = await _read_json(request) or {}
    chain_id = body.get("chainId")
    if not chain_id:
        return web.json_response({"error": "Missing chainId"}, status=400)

    args = body.get("args") or {}
    if not isinstance(args, dict):
        return web.json_response({"error": "args must be an object"}, status=400)

    arguments: dict[str, Any] = {"chainId": chain_id, **args}
    if body.get("lockAddress"):
        arguments["lockAddress"] = body["lockAddress"]
    return await _legacy_call(request, TargetGroup.INSTANCE, arguments)


async def _send_event(response: web.StreamResponse, data: dict[str, Any]) -> None:
    await response.write(f"data: {json.dumps(data)}\n\n".encode())


async def sse(request: web.Request) -> web.StreamResponse:
    response = web.StreamResponse(
        headers={
            "Content-Type": "text/event-stream",
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": "Cache-Control",
        }
    )
    await response.prepare(request)
    await _send_event(
        response,
        {
            "type": "connection",
            "message": "Connected to Unlock MCP proxy server",
            "timestamp": _now(),
            "tools": len(CATALOGUE),
        },
    )

    interval = request.app[HEARTBEAT_KEY]
    try:
        while True:
            await asyncio.sleep(interval)
            await _send_event(response, {"type": "heartbeat", "timestamp": _now()})
    except ConnectionResetError:
        logger.debug("SSE client disconnected")
    return response


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def create_app(
    engine: DispatchEngine,
    config: AppConfig,
    heartbeat_seconds: float = HEARTBEAT_SECONDS,
) -> web.Application:
    app = web.Application(
        client_max_size=MAX_BODY_BYTES,
        middlewares=[log_requests, cors, internal_errors],
    )
    app[ENGINE_KEY] = engine
    app[CONFIG_KEY] = config
    app[HEARTBEAT_KEY] = heartbeat_seconds

    app.router.add_get("/", index)
    app.router.add_get("/health", health)
    app.router.add_get("/tools", list_tools)
    app.router.add_post("/tools/call", call_tool)
    app.router.add_post("/unlock/{method}", legacy_unlock)
    app.router.add_post("/lock/{method}", legacy_lock)
    app.router.add_get("/sse", sse)
    return app


async def serve(engine: DispatchEngine, config: AppConfig) -> None:
    """Run the HTTP server until cancelled."""
    app = create_app(engine, config)
    runner = web.AppRunner(app)
    await runner.setup()

    host, port = config.server.host, config.server.port
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info("Unlock MCP proxy server listening on %s:%d", host, port)
    logger.info("Available tools: %d", len(CATALOGUE))
    logger.info("Supported chains: %s", ", ".join(str(c) for c in engine.supported_chains))

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
        logger.info("HTTP server stopped")
