"""Configuration loader — reads config.yaml and .env, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

MODES = ("stdio", "http")

_ADDRESS_RE = re.compile(r"0x[0-9a-fA-F]{40}")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    chain_id: int = 0
    name: str = ""
    short: str = ""


@dataclass(frozen=True)
class RpcConfig:
    infura_api_key: str = ""
    alchemy_api_key: str = ""
    timeout: int = 30


@dataclass(frozen=True)
class SignerConfig:
    private_key: str = ""


@dataclass(frozen=True)
class ServerConfig:
    mode: str = "stdio"
    host: str = "0.0.0.0"
    port: int = 3000


@dataclass(frozen=True)
class AbiConfig:
    factory: str = ""
    instance: str = ""


DEFAULT_CHAINS: dict[int, ChainConfig] = {
    8453: ChainConfig(chain_id=8453, name="Base", short="base-mainnet"),
    84532: ChainConfig(chain_id=84532, name="Base-Sepolia", short="base-sepolia"),
}


@dataclass(frozen=True)
class AppConfig:
    unlock_address: str = ""
    lock_address: str = ""
    rpc: RpcConfig = field(default_factory=RpcConfig)
    signer: SignerConfig = field(default_factory=SignerConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    abis: AbiConfig = field(default_factory=AbiConfig)
    chains: dict[int, ChainConfig] = field(default_factory=lambda: dict(DEFAULT_CHAINS))


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


def _setting(raw: dict[str, Any], key: str, env_var: str, default: Any = "") -> Any:
    """Return a YAML value, falling back to an environment variable."""
    value = raw.get(key)
    if value in (None, ""):
        value = os.environ.get(env_var, default)
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_rpc(raw: dict[str, Any]) -> RpcConfig:
    return RpcConfig(
        infura_api_key=_setting(raw, "infura_api_key", "INFURA_API_KEY"),
        alchemy_api_key=_setting(raw, "alchemy_api_key", "ALCHEMY_API_KEY"),
        timeout=int(_setting(raw, "timeout", "RPC_TIMEOUT", 30)),
    )


def _build_signer(raw: dict[str, Any]) -> SignerConfig:
    return SignerConfig(private_key=_setting(raw, "private_key", "PRIVATE_KEY"))


def _build_server(raw: dict[str, Any]) -> ServerConfig:
    return ServerConfig(
        mode=str(_setting(raw, "mode", "MCP_MODE", "stdio")),
        host=raw.get("host", "0.0.0.0"),
        port=int(_setting(raw, "port", "PORT", 3000)),
    )


def _build_abis(raw: dict[str, Any]) -> AbiConfig:
    return AbiConfig(
        factory=raw.get("factory", ""),
        instance=raw.get("instance", ""),
    )


def _build_chains(raw: dict[Any, Any]) -> dict[int, ChainConfig]:
    if not raw:
        return dict(DEFAULT_CHAINS)
    chains: dict[int, ChainConfig] = {}
    for chain_id, cfg in raw.items():
        chains[int(chain_id)] = ChainConfig(
            chain_id=int(chain_id),
            name=cfg.get("name", ""),
            short=cfg.get("short", ""),
        )
    return chains


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. When omitted, ``config.yaml`` in
            the project root is read if it exists; otherwise the process
            environment alone supplies the settings.
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
        required = False
    else:
        required = True
    config_path = Path(config_path)

    raw: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        raw = _interpolate_env(raw)
    elif required:
        raise FileNotFoundError(f"Config file not found: {config_path}")

    cfg = AppConfig(
        unlock_address=_setting(raw, "unlock_address", "UNLOCK_ADDRESS"),
        lock_address=_setting(raw, "lock_address", "LOCK_ADDRESS"),
        rpc=_build_rpc(raw.get("rpc") or {}),
        signer=_build_signer(raw.get("signer") or {}),
        server=_build_server(raw.get("server") or {}),
        abis=_build_abis(raw.get("abis") or {}),
        chains=_build_chains(raw.get("chains") or {}),
    )

    _validate(cfg)
    if config_path.exists():
        logger.info("Configuration loaded from %s", config_path)
    else:
        logger.info("Configuration loaded from environment")
    return cfg


def require_signer(cfg: AppConfig) -> None:
    """Raise unless a signing key is configured (submit-capable transports)."""
    if not cfg.signer.private_key:
        raise ValueError("PRIVATE_KEY is required for the stdio transport")


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.unlock_address:
        raise ValueError("UNLOCK_ADDRESS is required")
    if not _ADDRESS_RE.fullmatch(cfg.unlock_address):
        raise ValueError(f"Invalid Unlock address '{cfg.unlock_address}'")
    if cfg.lock_address and not _ADDRESS_RE.fullmatch(cfg.lock_address):
        raise ValueError(f"Invalid default lock address '{cfg.lock_address}'")

    if not cfg.rpc.infura_api_key and not cfg.rpc.alchemy_api_key:
        raise ValueError("Either INFURA_API_KEY or ALCHEMY_API_KEY is required")

    if cfg.server.mode not in MODES:
        raise ValueError(
            f"Unknown mode '{cfg.server.mode}' (expected one of {', '.join(MODES)})"
        )

    for chain_id, chain in cfg.chains.items():
        if not chain.short:
            raise ValueError(f"Chain {chain_id} has no RPC short name")
