"""Per-chain connection handles, built once at startup."""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping

from ..config import AppConfig
from .evm import EvmClient, rpc_url

logger = logging.getLogger(__name__)


def build_chain_registry(config: AppConfig, signing: bool = False) -> Mapping[int, EvmClient]:
    """Create one client per configured chain; the mapping is read-only."""
    private_key = config.signer.private_key if signing else ""
    clients: dict[int, EvmClient] = {}
    for chain_id, chain_cfg in config.chains.items():
        clients[chain_id] = EvmClient(chain_cfg, config.rpc, private_key)
        host = "/".join(rpc_url(chain_cfg, config.rpc).split("/")[:3])
        logger.info("Initialized provider for chain %d (%s) via %s", chain_id, chain_cfg.name, host)
    return MappingProxyType(clients)


__all__ = ["EvmClient", "build_chain_registry"]
