"""Command-line interface for the Unlock MCP server."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace

from .config import AppConfig, load_config, require_signer
from .logging_setup import configure_logging
from .services import DispatchEngine
from .transports import http, stdio

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="unlock-mcp",
        description="Unlock Protocol tools over MCP stdio or HTTP",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("stdio", help="Serve MCP over stdin/stdout, signing transactions")

    http_parser = sub.add_parser("http", help="Serve HTTP, returning unsigned transactions")
    http_parser.add_argument("--host", default=None, help="Bind address (overrides config)")
    http_parser.add_argument("--port", type=int, default=None, help="Port (overrides config)")

    return parser


def _with_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    server = config.server
    if getattr(args, "host", None):
        server = replace(server, host=args.host)
    if getattr(args, "port", None):
        server = replace(server, port=args.port)
    return replace(config, server=server)


async def _run(args: argparse.Namespace) -> None:
    """Start the selected transport."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    mode = args.command or config.server.mode

    if mode == "stdio":
        require_signer(config)
        engine = DispatchEngine.from_config(config, signing=True)
        await stdio.serve(engine)
    else:
        config = _with_overrides(config, args)
        engine = DispatchEngine.from_config(config)
        await http.serve(engine, config)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    try:
        asyncio.run(_run(args))
    except (ValueError, FileNotFoundError) as e:
        logger.error("Fatal error: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
