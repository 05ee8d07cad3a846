"""Chain client protocol — contract read / transaction submission abstraction."""
from typing import Any, Protocol

from ..models import CallPlan, TransactionReceipt


class ChainClient(Protocol):
    """One long-lived connection to a single chain."""

    chain_id: int

    async def call(self, plan: CallPlan) -> Any: ...

    async def submit(self, plan: CallPlan) -> TransactionReceipt: ...
