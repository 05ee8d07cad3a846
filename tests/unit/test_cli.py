"""Unit tests for CLI argument parsing and transport selection."""
from __future__ import annotations

import argparse
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from unlock_mcp.cli import _run, _with_overrides, build_parser
from unlock_mcp.config import AppConfig


class TestBuildParser:
    def test_stdio_command(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["stdio"])
        assert args.command == "stdio"

    def test_http_command_defaults(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["http"])
        assert args.command == "http"
        assert args.host is None
        assert args.port is None

    def test_http_command_overrides(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["http", "--host", "127.0.0.1", "--port", "8080"])
        assert args.host == "127.0.0.1"
        assert args.port == 8080

    def test_config_flag(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["--config", "/tmp/c.yaml", "stdio"])
        assert args.config == "/tmp/c.yaml"

    def test_log_level_flag(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["--log-level", "DEBUG", "http"])
        assert args.log_level == "DEBUG"

    def test_no_command(self) -> None:
        parser = build_parser()
        args = parser.parse_args([])
        assert args.command is None


class TestOverrides:
    def test_host_and_port_replace_config(self, sample_app_config: AppConfig) -> None:
        args = argparse.Namespace(host="localhost", port=9000)
        cfg = _with_overrides(sample_app_config, args)
        assert cfg.server.host == "localhost"
        assert cfg.server.port == 9000
        assert cfg.server.mode == sample_app_config.server.mode

    def test_missing_overrides_keep_config(self, sample_app_config: AppConfig) -> None:
        cfg = _with_overrides(sample_app_config, argparse.Namespace())
        assert cfg.server == sample_app_config.server


class TestRun:
    @pytest.mark.asyncio
    async def test_http_mode_from_config(self, sample_yaml_path: Path) -> None:
        args = build_parser().parse_args(["--config", str(sample_yaml_path)])
        engine = MagicMock()

        with patch("unlock_mcp.cli.DispatchEngine.from_config", return_value=engine) as factory:
            with patch("unlock_mcp.cli.http.serve", new_callable=AsyncMock) as serve:
                await _run(args)

        factory.assert_called_once()
        assert factory.call_args.kwargs == {}
        serve.assert_awaited_once()
        assert serve.call_args.args[1].server.port == 8080

    @pytest.mark.asyncio
    async def test_stdio_command_signs(self, sample_yaml_path: Path) -> None:
        args = build_parser().parse_args(["--config", str(sample_yaml_path), "stdio"])
        engine = MagicMock()

        with patch("unlock_mcp.cli.DispatchEngine.from_config", return_value=engine) as factory:
            with patch("unlock_mcp.cli.stdio.serve", new_callable=AsyncMock) as serve:
                await _run(args)

        assert factory.call_args.kwargs == {"signing": True}
        serve.assert_awaited_once_with(engine)

    @pytest.mark.asyncio
    async def test_stdio_without_key_raises(self, tmp_path: Path, sample_yaml_path: Path) -> None:
        content = sample_yaml_path.read_text().replace("private_key:", "unused:")
        cfg_file = tmp_path / "nokey.yaml"
        cfg_file.write_text(content)
        args = build_parser().parse_args(["--config", str(cfg_file), "stdio"])

        with patch("unlock_mcp.cli.stdio.serve", new_callable=AsyncMock) as serve:
            with pytest.raises(ValueError, match="PRIVATE_KEY"):
                await _run(args)

        serve.assert_not_awaited()
