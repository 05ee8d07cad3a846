"""EVM chain support."""
from .client import EvmClient, rpc_url

__all__ = ["EvmClient", "rpc_url"]
