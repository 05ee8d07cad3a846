"""Static read/write partition of the operation catalogue."""
from __future__ import annotations

from typing import Iterable, Mapping

from ..models import OperationDescriptor, OperationKind

QUERY_OPERATIONS: frozenset[str] = frozenset(
    {
        # Unlock
        "chainIdRead",
        "unlockVersion",
        "governanceToken",
        "getGlobalTokenSymbol",
        "publicLockLatestVersion",
        # PublicLock
        "balanceOf",
        "getApproved",
        "ownerOf",
        "tokenByIndex",
        "tokenOfOwnerByIndex",
        "tokenURI",
        "totalSupply",
        "supportsInterface",
        "expirationDuration",
        "freeTrialLength",
        "gasRefundValue",
        "keyPrice",
        "maxKeysPerAddress",
        "maxNumberOfKeys",
        "name",
        "numberOfOwners",
        "publicLockVersion",
        "refundPenaltyBasisPoints",
        "symbol",
        "tokenAddress",
        "transferFeeBasisPoints",
        "unlockProtocol",
        "getHasValidKey",
        "isValidKey",
        "keyExpirationTimestampFor",
        "keyManagerOf",
        "totalKeys",
        "isRenewable",
        "getCancelAndRefundValue",
        "getTransferFee",
        "purchasePriceFor",
        "referrerFees",
        "hasRole",
        "isLockManager",
        "isOwner",
        "owner",
    }
)

MUTATION_OPERATIONS: frozenset[str] = frozenset(
    {
        # Unlock
        "createLock",
        "createUpgradeableLock",
        "upgradeLock",
        # PublicLock
        "purchase",
        "extend",
        "renewMembershipFor",
        "grantKeys",
        "grantKeyExtension",
        "setKeyExpiration",
        "setKeyManagerOf",
        "approve",
        "transferFrom",
        "safeTransferFrom",
        "lendKey",
        "unlendKey",
        "shareKey",
        "mergeKeys",
        "cancelAndRefund",
        "expireAndRefundFor",
        "burn",
        "updateKeyPricing",
        "updateLockConfig",
        "updateRefundPenalty",
        "updateTransferFee",
        "setLockMetadata",
        "setReferrerFee",
        "setGasRefundValue",
        "setEventHooks",
        "migrate",
        "withdraw",
        "grantRole",
        "renounceRole",
        "revokeRole",
        "renounceLockManager",
        "setOwner",
    }
)


def classify(name: str) -> OperationKind:
    if name in QUERY_OPERATIONS:
        return OperationKind.QUERY
    if name in MUTATION_OPERATIONS:
        return OperationKind.MUTATION
    return OperationKind.UNKNOWN


def check_partition(catalogue: Mapping[str, OperationDescriptor]) -> None:
    """Raise ValueError unless the two name sets partition the catalogue exactly.

    Also checks that each descriptor's declared kind agrees with its set.
    """
    overlap = QUERY_OPERATIONS & MUTATION_OPERATIONS
    if overlap:
        raise ValueError(f"Operations classified twice: {_names(overlap)}")

    classified = QUERY_OPERATIONS | MUTATION_OPERATIONS
    names = set(catalogue)
    if names - classified:
        raise ValueError(f"Unclassified operations: {_names(names - classified)}")
    if classified - names:
        raise ValueError(f"Classified but not catalogued: {_names(classified - names)}")

    for name, descriptor in catalogue.items():
        if classify(name) is not descriptor.kind:
            raise ValueError(
                f"Operation '{name}' is declared {descriptor.kind.value} "
                f"but classified {classify(name).value}"
            )


def _names(names: Iterable[str]) -> str:
    return ", ".join(sorted(names))
