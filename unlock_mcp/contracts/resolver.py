"""Target resolution — which contract address and interface an operation hits."""
from __future__ import annotations

import logging
from typing import Any

from ..errors import UnresolvedTarget
from ..models import OperationDescriptor, ResolvedTarget, TargetGroup

logger = logging.getLogger(__name__)


class Resolver:
    """Resolve operations to the Unlock factory or a PublicLock instance.

    Factory operations always target the configured factory. Instance
    operations use the per-call ``lockAddress``, then the configured default
    lock, and fail when neither is available.
    """

    def __init__(self, factory_address: str, default_lock_address: str = "") -> None:
        if not factory_address:
            raise ValueError("Unlock factory address is required")
        self._factory = factory_address
        self._default_lock = default_lock_address or ""

    def resolve(self, descriptor: OperationDescriptor, args: dict[str, Any]) -> ResolvedTarget:
        if descriptor.target is TargetGroup.FACTORY:
            return ResolvedTarget(address=self._factory, interface=TargetGroup.FACTORY)

        lock_address = args.get("lockAddress") or self._default_lock
        if not lock_address:
            raise UnresolvedTarget("lockAddress is required for PublicLock functions")
        return ResolvedTarget(address=lock_address, interface=TargetGroup.INSTANCE)
