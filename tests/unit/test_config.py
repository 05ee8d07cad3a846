"""Unit tests for config loading, env interpolation, and validation."""
from __future__ import annotations

from pathlib import Path

import pytest

from conftest import DEV_PRIVATE_KEY, LOCK_ADDRESS, UNLOCK_ADDRESS
from unlock_mcp.config import (
    DEFAULT_CHAINS,
    AppConfig,
    ChainConfig,
    RpcConfig,
    ServerConfig,
    SignerConfig,
    _interpolate_env,
    load_config,
    require_signer,
)


def _write(tmp_path: Path, content: str) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(content)
    return cfg_file


class TestInterpolateEnv:
    def test_simple_substitution(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert _interpolate_env("${MY_VAR}") == "hello"

    def test_missing_var_becomes_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NONEXISTENT_VAR_XYZ", raising=False)
        assert _interpolate_env("${NONEXISTENT_VAR_XYZ}") == ""

    def test_nested_dict(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOK", "secret")
        result = _interpolate_env({"rpc": {"infura_api_key": "${TOK}"}, "plain": "text"})
        assert result == {"rpc": {"infura_api_key": "secret"}, "plain": "text"}

    def test_non_string_passthrough(self) -> None:
        assert _interpolate_env(42) == 42
        assert _interpolate_env(True) is True


class TestLoadConfig:
    def test_loads_valid_yaml(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        assert isinstance(cfg, AppConfig)
        assert cfg.unlock_address == UNLOCK_ADDRESS
        assert cfg.lock_address == LOCK_ADDRESS
        assert cfg.rpc.infura_api_key == "infura-key"
        assert cfg.rpc.timeout == 10
        assert cfg.server == ServerConfig(mode="http", host="127.0.0.1", port=8080)
        assert cfg.chains[84532].short == "base-sepolia"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.yaml")

    def test_env_interpolation_in_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEST_UNLOCK", UNLOCK_ADDRESS)
        cfg_file = _write(
            tmp_path,
            'unlock_address: "${TEST_UNLOCK}"\nrpc:\n  alchemy_api_key: "alc"\n',
        )
        cfg = load_config(cfg_file)
        assert cfg.unlock_address == UNLOCK_ADDRESS
        assert cfg.rpc.alchemy_api_key == "alc"

    def test_environment_fallback(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("UNLOCK_ADDRESS", UNLOCK_ADDRESS)
        monkeypatch.setenv("INFURA_API_KEY", "from-env")
        monkeypatch.setenv("PRIVATE_KEY", DEV_PRIVATE_KEY)
        monkeypatch.setenv("MCP_MODE", "http")
        monkeypatch.setenv("PORT", "4000")
        monkeypatch.setenv("RPC_TIMEOUT", "5")

        cfg = load_config(_write(tmp_path, "{}\n"))

        assert cfg.rpc.infura_api_key == "from-env"
        assert cfg.rpc.timeout == 5
        assert cfg.signer.private_key == DEV_PRIVATE_KEY
        assert cfg.server.mode == "http"
        assert cfg.server.port == 4000
        assert cfg.lock_address == ""

    def test_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("UNLOCK_ADDRESS", UNLOCK_ADDRESS)
        monkeypatch.setenv("ALCHEMY_API_KEY", "alc")

        cfg = load_config(_write(tmp_path, ""))

        assert cfg.server == ServerConfig()
        assert cfg.chains == DEFAULT_CHAINS
        assert cfg.abis.factory == ""
        assert cfg.rpc.timeout == 30


class TestValidation:
    def test_missing_unlock_address_raises(self, tmp_path: Path) -> None:
        cfg_file = _write(tmp_path, 'rpc:\n  infura_api_key: "k"\n')
        with pytest.raises(ValueError, match="UNLOCK_ADDRESS is required"):
            load_config(cfg_file)

    def test_malformed_unlock_address_raises(self, tmp_path: Path) -> None:
        cfg_file = _write(tmp_path, 'unlock_address: "0x123"\nrpc:\n  infura_api_key: "k"\n')
        with pytest.raises(ValueError, match="Invalid Unlock address"):
            load_config(cfg_file)

    def test_malformed_lock_address_raises(self, tmp_path: Path) -> None:
        cfg_file = _write(
            tmp_path,
            f'unlock_address: "{UNLOCK_ADDRESS}"\nlock_address: "nope"\n'
            'rpc:\n  infura_api_key: "k"\n',
        )
        with pytest.raises(ValueError, match="Invalid default lock address"):
            load_config(cfg_file)

    def test_missing_rpc_credentials_raises(self, tmp_path: Path) -> None:
        cfg_file = _write(tmp_path, f'unlock_address: "{UNLOCK_ADDRESS}"\n')
        with pytest.raises(ValueError, match="INFURA_API_KEY or ALCHEMY_API_KEY"):
            load_config(cfg_file)

    def test_unknown_mode_raises(self, tmp_path: Path) -> None:
        cfg_file = _write(
            tmp_path,
            f'unlock_address: "{UNLOCK_ADDRESS}"\nrpc:\n  infura_api_key: "k"\n'
            "server:\n  mode: websocket\n",
        )
        with pytest.raises(ValueError, match="Unknown mode 'websocket'"):
            load_config(cfg_file)

    def test_chain_without_short_name_raises(self, tmp_path: Path) -> None:
        cfg_file = _write(
            tmp_path,
            f'unlock_address: "{UNLOCK_ADDRESS}"\nrpc:\n  infura_api_key: "k"\n'
            "chains:\n  8453:\n    name: Base\n",
        )
        with pytest.raises(ValueError, match="Chain 8453 has no RPC short name"):
            load_config(cfg_file)


class TestRequireSigner:
    def test_missing_key_raises(self) -> None:
        with pytest.raises(ValueError, match="PRIVATE_KEY is required"):
            require_signer(AppConfig(unlock_address=UNLOCK_ADDRESS))

    def test_present_key_passes(self, sample_app_config: AppConfig) -> None:
        require_signer(sample_app_config)


class TestFrozenConfigs:
    def test_chain_config_immutable(self) -> None:
        c = ChainConfig(chain_id=8453, name="Base", short="base-mainnet")
        with pytest.raises(AttributeError):
            c.short = "other"  # type: ignore[misc]

    def test_rpc_config_immutable(self) -> None:
        r = RpcConfig(infura_api_key="k")
        with pytest.raises(AttributeError):
            r.timeout = 999  # type: ignore[misc]

    def test_signer_config_immutable(self) -> None:
        s = SignerConfig(private_key="k")
        with pytest.raises(AttributeError):
            s.private_key = "other"  # type: ignore[misc]
