"""Call plan construction — argument ordering, method aliasing, calldata."""
from __future__ import annotations

import logging
from typing import Any

from eth_abi.exceptions import EncodingError

from ..errors import InvalidArguments
from ..models import (
    CallPlan,
    Execution,
    OperationDescriptor,
    OperationKind,
    ResolvedTarget,
    UnsignedTransaction,
)
from .abi import InterfaceRegistry, encode_call

logger = logging.getLogger(__name__)

# Public operation name -> interface method name.
METHOD_ALIASES: dict[str, str] = {
    "chainIdRead": "chainId",
}


class CallBuilder:
    """Turn a resolved, validated operation into a CallPlan.

    The executable form of a mutation (submit vs encode) is chosen by the
    caller's capability flag; the builder itself is transport-agnostic.
    """

    def __init__(self, interfaces: InterfaceRegistry) -> None:
        self._interfaces = interfaces

    def build(
        self,
        target: ResolvedTarget,
        descriptor: OperationDescriptor,
        args: dict[str, Any],
        can_submit: bool,
    ) -> CallPlan:
        call_args: dict[str, Any] = {}
        for key, value in args.items():
            f = descriptor.field(key)
            if f is not None and f.passed:
                call_args[key] = value

        method = METHOD_ALIASES.get(descriptor.name, descriptor.name)
        entry = self._interfaces.select(target.interface, method, call_args)
        ordered = tuple(call_args[inp["name"]] for inp in entry.get("inputs", []))

        if descriptor.kind is OperationKind.QUERY:
            execution = Execution.READ
        elif can_submit:
            execution = Execution.SUBMIT
        else:
            execution = Execution.ENCODE

        try:
            data = encode_call(entry, ordered)
        except (EncodingError, ValueError, TypeError) as e:
            raise InvalidArguments(
                descriptor.name, [("arguments", f"Failed to encode {method}: {e}")]
            ) from e

        return CallPlan(
            target=target,
            operation=descriptor.name,
            method=method,
            function=entry,
            arguments=ordered,
            data=data,
            kind=descriptor.kind,
            execution=execution,
        )

    @staticmethod
    def unsigned_transaction(plan: CallPlan, chain_id: int) -> UnsignedTransaction:
        """Payload for external signing: no value transfer."""
        return UnsignedTransaction(to=plan.target.address, data=plan.data, chain_id=chain_id)
