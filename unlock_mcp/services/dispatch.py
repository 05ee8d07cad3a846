"""Dispatch engine — validate, classify, resolve, build and execute one operation."""
from __future__ import annotations

import logging
from typing import Any, Mapping

from ..chains import build_chain_registry
from ..config import AppConfig
from ..contracts import CallBuilder, InterfaceRegistry, Resolver, stringify
from ..errors import (
    DispatchError,
    InvalidArguments,
    UnclassifiedOperation,
    UnknownOperation,
    UnsupportedChain,
)
from ..interfaces.chain import ChainClient
from ..models import (
    Capabilities,
    Execution,
    Failure,
    FailureKind,
    OperationKind,
    Outcome,
    QueryResult,
    Success,
)
from ..operations import CATALOGUE, check_partition, classify, lookup, validate

logger = logging.getLogger(__name__)


class DispatchEngine:
    """Run catalogue operations against the configured contracts.

    Holds only read-only collaborators; every call to :meth:`dispatch` is
    independent. Failures of any kind come back as :class:`Failure` values.
    """

    def __init__(
        self,
        resolver: Resolver,
        interfaces: InterfaceRegistry,
        chains: Mapping[int, ChainClient],
    ) -> None:
        check_partition(CATALOGUE)
        self._resolver = resolver
        self._builder = CallBuilder(interfaces)
        self._chains = chains

    @classmethod
    def from_config(cls, config: AppConfig, signing: bool = False) -> DispatchEngine:
        interfaces = InterfaceRegistry.from_files(
            config.abis.factory or None, config.abis.instance or None
        )
        resolver = Resolver(config.unlock_address, config.lock_address)
        return cls(resolver, interfaces, build_chain_registry(config, signing=signing))

    @property
    def supported_chains(self) -> list[int]:
        return sorted(self._chains)

    async def dispatch(
        self, name: str, raw_args: Any, capabilities: Capabilities
    ) -> Outcome:
        """Execute one operation; never raises."""
        try:
            return await self._dispatch(name, raw_args, capabilities)
        except InvalidArguments as e:
            logger.warning("Rejected %s: %s", name, e.message)
            return Failure(kind=e.kind, message=e.message, violations=e.violations)
        except DispatchError as e:
            logger.warning("Tool call failed: %s: %s", name, e.message)
            return Failure(kind=e.kind, message=e.message)
        except Exception as e:
            logger.exception("Unexpected error while dispatching %s", name)
            return Failure(kind=FailureKind.INTERNAL, message=str(e) or e.__class__.__name__)

    async def _dispatch(
        self, name: str, raw_args: Any, capabilities: Capabilities
    ) -> Outcome:
        descriptor = lookup(name)
        if descriptor is None:
            raise UnknownOperation(name)

        args = validate(descriptor, raw_args)

        if classify(name) is OperationKind.UNKNOWN:
            raise UnclassifiedOperation(name)

        target = self._resolver.resolve(descriptor, args)
        plan = self._builder.build(target, descriptor, args, capabilities.can_submit)
        chain_id = args["chainId"]

        logger.info(
            "Calling contract function %s at %s on chain %d (%d args, %s)",
            plan.method,
            target.address,
            chain_id,
            len(plan.arguments),
            plan.execution.value,
        )

        if plan.execution is Execution.ENCODE:
            return Success(
                operation=name,
                chain_id=chain_id,
                payload=self._builder.unsigned_transaction(plan, chain_id),
            )

        client = self._chains.get(chain_id)
        if client is None:
            raise UnsupportedChain(chain_id)

        if plan.execution is Execution.READ:
            value = await client.call(plan)
            result = stringify(value)
            logger.info("Read function completed: %s -> %s", plan.method, result)
            return Success(operation=name, chain_id=chain_id, payload=QueryResult(result))

        receipt = await client.submit(plan)
        logger.info(
            "Transaction mined: %s %s in block %d (gas used %d)",
            name,
            receipt.transaction_hash,
            receipt.block_number,
            receipt.gas_used,
        )
        return Success(operation=name, chain_id=chain_id, payload=receipt)
