"""EVM JSON-RPC client — contract reads and signed transaction submission."""
from __future__ import annotations

import logging
import ssl
from typing import Any

import aiohttp
import certifi
from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from ...config import ChainConfig, RpcConfig
from ...contracts.abi import decode_result
from ...errors import ChainCallFailed
from ...models import CallPlan, TransactionReceipt

logger = logging.getLogger(__name__)


def rpc_url(chain: ChainConfig, rpc: RpcConfig) -> str:
    """Build the provider URL for a chain from whichever RPC credential is set."""
    if rpc.infura_api_key:
        return f"https://{chain.short}.infura.io/v3/{rpc.infura_api_key}"
    if rpc.alchemy_api_key:
        return f"https://{chain.short}.g.alchemy.com/v2/{rpc.alchemy_api_key}"
    raise ValueError("Provide INFURA_API_KEY or ALCHEMY_API_KEY")


class EvmClient:
    """Read-only provider for one chain, optionally bound to a signing key."""

    def __init__(self, chain: ChainConfig, rpc: RpcConfig, private_key: str = "") -> None:
        self.chain_id = chain.chain_id
        self.name = chain.name

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        provider = AsyncHTTPProvider(
            rpc_url(chain, rpc),
            request_kwargs={
                "ssl": ssl_context,
                "timeout": aiohttp.ClientTimeout(total=rpc.timeout),
            },
            exception_retry_configuration=None,
        )
        self._w3 = AsyncWeb3(provider)
        self._account = Account.from_key(private_key) if private_key else None

    @property
    def can_sign(self) -> bool:
        return self._account is not None

    async def call(self, plan: CallPlan) -> Any:
        """Run a read-only call and return the decoded value."""
        request = {"to": Web3.to_checksum_address(plan.target.address), "data": plan.data}
        try:
            raw = await self._w3.eth.call(request)
            return decode_result(plan.function, bytes(raw))
        except Exception as e:
            raise ChainCallFailed(str(e) or e.__class__.__name__) from e

    async def submit(self, plan: CallPlan) -> TransactionReceipt:
        """Sign and send a transaction, then wait until it is mined."""
        if self._account is None:
            raise ChainCallFailed(f"No signing key configured for chain {self.chain_id}")

        sender = self._account.address
        tx: dict[str, Any] = {
            "from": sender,
            "to": Web3.to_checksum_address(plan.target.address),
            "data": plan.data,
            "value": 0,
            "chainId": self.chain_id,
        }

        try:
            tx["nonce"] = await self._w3.eth.get_transaction_count(sender, "pending")
            tx["gas"] = await self._w3.eth.estimate_gas(tx)
            tx["gasPrice"] = await self._w3.eth.gas_price

            signed = self._account.sign_transaction(tx)
            tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
            logger.info(
                "Transaction sent: %s (%s on chain %d)",
                Web3.to_hex(tx_hash),
                plan.method,
                self.chain_id,
            )
            receipt = await self._w3.eth.wait_for_transaction_receipt(tx_hash)
        except Exception as e:
            raise ChainCallFailed(str(e) or e.__class__.__name__) from e

        hash_hex = Web3.to_hex(tx_hash)
        if receipt["status"] == 0:
            raise ChainCallFailed(
                f"Transaction {hash_hex} reverted in block {receipt['blockNumber']}"
            )

        return TransactionReceipt(
            transaction_hash=hash_hex,
            block_number=int(receipt["blockNumber"]),
            gas_used=int(receipt["gasUsed"]),
        )
