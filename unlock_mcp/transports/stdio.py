"""stdio transport — MCP JSON-RPC 2.0 over newline-delimited stdin/stdout."""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, TextIO

from .. import __version__
from ..models import Capabilities, Failure
from ..operations import CATALOGUE, list_operations
from ..services import DispatchEngine
from .formatting import outcome_text

logger = logging.getLogger(__name__)

SERVER_NAME = "unlock-mcp-server"
PROTOCOL_VERSION = "2024-11-05"

# The stdio process holds the signing key, so writes are submitted.
CAPABILITIES = Capabilities(can_submit=True)

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ProtocolError(Exception):
    """A JSON-RPC error reported back to the client."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def _error(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


def _result(request_id: Any, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


class StdioServer:
    """Serve MCP requests read line by line from a text stream."""

    def __init__(
        self,
        engine: DispatchEngine,
        input_stream: TextIO | None = None,
        output_stream: TextIO | None = None,
    ) -> None:
        self._engine = engine
        self._input = input_stream if input_stream is not None else sys.stdin
        self._output = output_stream if output_stream is not None else sys.stdout
        self._tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Message handling
    # ------------------------------------------------------------------

    async def handle_line(self, line: str) -> dict[str, Any] | None:
        try:
            message = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning("Unparseable frame: %s", e)
            return _error(None, PARSE_ERROR, "Parse error")
        return await self.handle_message(message)

    async def handle_message(self, message: Any) -> dict[str, Any] | None:
        """Handle one decoded frame. Returns None for notifications."""
        if (
            not isinstance(message, dict)
            or message.get("jsonrpc") != "2.0"
            or not isinstance(message.get("method"), str)
        ):
            request_id = message.get("id") if isinstance(message, dict) else None
            return _error(request_id, INVALID_REQUEST, "Invalid Request")

        method = message["method"]
        if "id" not in message:
            logger.debug("Notification %s", method)
            return None

        request_id = message["id"]
        try:
            result = await self._handle_request(method, message.get("params"))
        except ProtocolError as e:
            return _error(request_id, e.code, e.message)
        except Exception:
            logger.exception("Request %s failed", method)
            return _error(request_id, INTERNAL_ERROR, "Internal error")
        return _result(request_id, result)

    async def _handle_request(self, method: str, params: Any) -> Any:
        if method == "initialize":
            return self._initialize(params)
        if method == "ping":
            return {}
        if method == "tools/list":
            return {"tools": list_operations()}
        if method == "tools/call":
            return await self._call_tool(params)
        raise ProtocolError(METHOD_NOT_FOUND, f"Method not found: {method}")

    def _initialize(self, params: Any) -> dict[str, Any]:
        requested = params.get("protocolVersion") if isinstance(params, dict) else None
        return {
            "protocolVersion": requested or PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
        }

    async def _call_tool(self, params: Any) -> dict[str, Any]:
        if not isinstance(params, dict) or not isinstance(params.get("name"), str):
            raise ProtocolError(INVALID_PARAMS, "tools/call requires a tool name")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}

        outcome = await self._engine.dispatch(params["name"], arguments, CAPABILITIES)
        result: dict[str, Any] = {"content": [{"type": "text", "text": outcome_text(outcome)}]}
        if isinstance(outcome, Failure):
            result["isError"] = True
        return result

    # ------------------------------------------------------------------
    # Stream loop
    # ------------------------------------------------------------------

    def _write(self, frame: dict[str, Any]) -> None:
        self._output.write(json.dumps(frame) + "\n")
        self._output.flush()

    async def _respond(self, line: str) -> None:
        frame = await self.handle_line(line)
        if frame is not None:
            self._write(frame)

    async def run(self) -> None:
        """Read frames until EOF; each request runs as its own task."""
        logger.info("Unlock MCP server running on stdio")
        logger.info("Available tools: %d", len(CATALOGUE))
        logger.info("Supported chains: %s", ", ".join(str(c) for c in self._engine.supported_chains))

        while True:
            line = await asyncio.to_thread(self._input.readline)
            if not line:
                break
            if not line.strip():
                continue
            task = asyncio.create_task(self._respond(line))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        if self._tasks:
            await asyncio.gather(*self._tasks)
        logger.info("stdin closed, stdio server stopped")


async def serve(engine: DispatchEngine) -> None:
    await StdioServer(engine).run()
