"""Outcome rendering shared by the transports."""
from __future__ import annotations

from typing import Any

from ..models import (
    Failure,
    Outcome,
    QueryResult,
    TransactionReceipt,
    UnsignedTransaction,
)


def transaction_json(tx: UnsignedTransaction) -> dict[str, Any]:
    return {"to": tx.to, "data": tx.data, "value": tx.value, "chainId": tx.chain_id}


def outcome_json(outcome: Outcome) -> dict[str, Any]:
    """JSON body for an outcome, in the wire format clients expect."""
    if isinstance(outcome, Failure):
        return {"success": False, "error": outcome.message}

    body: dict[str, Any] = {"success": True}
    payload = outcome.payload
    if isinstance(payload, QueryResult):
        body["result"] = payload.result
    elif isinstance(payload, UnsignedTransaction):
        body["transaction"] = transaction_json(payload)
    elif isinstance(payload, TransactionReceipt):
        body["transactionHash"] = payload.transaction_hash
        body["blockNumber"] = payload.block_number
        body["gasUsed"] = str(payload.gas_used)
    body["function"] = outcome.operation
    body["chainId"] = outcome.chain_id
    return body


def outcome_text(outcome: Outcome) -> str:
    """Human-readable rendering used by the stdio tool protocol."""
    if isinstance(outcome, Failure):
        return f"Error: {outcome.message}"

    payload = outcome.payload
    if isinstance(payload, QueryResult):
        return f"Function {outcome.operation} returned: {payload.result}"
    if isinstance(payload, TransactionReceipt):
        return (
            f"Transaction {payload.transaction_hash} mined in block "
            f"{payload.block_number}. Gas used: {payload.gas_used}"
        )
    tx = payload
    return (
        f"Unsigned transaction for {outcome.operation}: to={tx.to} "
        f"data={tx.data} value={tx.value} chainId={tx.chain_id}"
    )
