"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from unlock_mcp.config import AppConfig, RpcConfig, ServerConfig, SignerConfig
from unlock_mcp.contracts import InterfaceRegistry, Resolver
from unlock_mcp.models import CallPlan, TransactionReceipt
from unlock_mcp.services import DispatchEngine

UNLOCK_ADDRESS = "0x1ff7e338d5e582138c46044dc238543ce555c963"
LOCK_ADDRESS = "0x" + "ab" * 20
OTHER_LOCK = "0x" + "cd" * 20
OWNER = "0x" + "11" * 20
RECIPIENT = "0x" + "22" * 20
ZERO_ADDRESS = "0x" + "00" * 20

# Well-known anvil/hardhat development key; never holds real funds.
DEV_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"

_ENV_VARS = (
    "UNLOCK_ADDRESS",
    "LOCK_ADDRESS",
    "INFURA_API_KEY",
    "ALCHEMY_API_KEY",
    "PRIVATE_KEY",
    "MCP_MODE",
    "PORT",
    "RPC_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Keep the developer's shell and .env out of config tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    with patch("unlock_mcp.config.load_dotenv"):
        yield


# ---------------------------------------------------------------------------
# Fake chain handles
# ---------------------------------------------------------------------------


class FakeChain:
    """In-memory ChainClient recording every plan it receives."""

    def __init__(
        self,
        chain_id: int,
        value: Any = None,
        receipt: TransactionReceipt | None = None,
        error: Exception | None = None,
    ) -> None:
        self.chain_id = chain_id
        self.value = value
        self.receipt = receipt or TransactionReceipt(
            transaction_hash="0x" + "ee" * 32, block_number=123, gas_used=21000
        )
        self.error = error
        self.calls: list[CallPlan] = []
        self.submitted: list[CallPlan] = []

    async def call(self, plan: CallPlan) -> Any:
        self.calls.append(plan)
        if self.error is not None:
            raise self.error
        return self.value

    async def submit(self, plan: CallPlan) -> TransactionReceipt:
        self.submitted.append(plan)
        if self.error is not None:
            raise self.error
        return self.receipt

    @property
    def interactions(self) -> int:
        return len(self.calls) + len(self.submitted)


@pytest.fixture()
def base_chain() -> FakeChain:
    return FakeChain(8453)


@pytest.fixture()
def sepolia_chain() -> FakeChain:
    return FakeChain(84532)


@pytest.fixture()
def interfaces() -> InterfaceRegistry:
    return InterfaceRegistry.from_files()


@pytest.fixture()
def engine(
    interfaces: InterfaceRegistry, base_chain: FakeChain, sepolia_chain: FakeChain
) -> DispatchEngine:
    """Engine with no default lock configured."""
    return DispatchEngine(
        Resolver(UNLOCK_ADDRESS),
        interfaces,
        {8453: base_chain, 84532: sepolia_chain},
    )


@pytest.fixture()
def engine_with_default_lock(
    interfaces: InterfaceRegistry, base_chain: FakeChain, sepolia_chain: FakeChain
) -> DispatchEngine:
    return DispatchEngine(
        Resolver(UNLOCK_ADDRESS, LOCK_ADDRESS),
        interfaces,
        {8453: base_chain, 84532: sepolia_chain},
    )


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_app_config() -> AppConfig:
    return AppConfig(
        unlock_address=UNLOCK_ADDRESS,
        lock_address=LOCK_ADDRESS,
        rpc=RpcConfig(infura_api_key="infura-key", timeout=10),
        signer=SignerConfig(private_key=DEV_PRIVATE_KEY),
        server=ServerConfig(mode="http", host="127.0.0.1", port=3000),
    )


SAMPLE_YAML = textwrap.dedent(f"""\
    unlock_address: "{UNLOCK_ADDRESS}"
    lock_address: "{LOCK_ADDRESS}"
    rpc:
      infura_api_key: "infura-key"
      timeout: 10
    signer:
      private_key: "{DEV_PRIVATE_KEY}"
    server:
      mode: http
      host: 127.0.0.1
      port: 8080
    chains:
      8453:
        name: Base
        short: base-mainnet
      84532:
        name: Base-Sepolia
        short: base-sepolia
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
