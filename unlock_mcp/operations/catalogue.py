"""Operation catalogue — every supported Unlock / PublicLock function.

Factory (Unlock v14) and instance (PublicLock v15) operations are declared
here with their argument schemas. Field names match the parameter names of
the bundled interface definitions; the builder relies on that to place
arguments in declared order.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from ..models import ArgumentField, OperationDescriptor, OperationKind, TargetGroup
from .fields import (
    CHAIN_ID,
    IGNORED_LOCK_ADDRESS,
    LOCK_ADDRESS,
    address,
    hexbytes,
    json_schema,
    text,
    uint,
)

FACTORY = TargetGroup.FACTORY
INSTANCE = TargetGroup.INSTANCE


def _declares_lock(fields: tuple[ArgumentField, ...]) -> bool:
    return any(f.name == "lockAddress" for f in fields)


def _base_fields(target: TargetGroup, fields: tuple[ArgumentField, ...]) -> tuple[ArgumentField, ...]:
    if target is INSTANCE and not _declares_lock(fields):
        return (CHAIN_ID, LOCK_ADDRESS, *fields)
    return (CHAIN_ID, *fields)


def _ignored(target: TargetGroup, fields: tuple[ArgumentField, ...]) -> frozenset[str]:
    if target is FACTORY and not _declares_lock(fields):
        return frozenset({IGNORED_LOCK_ADDRESS})
    return frozenset()


def _query(
    name: str, target: TargetGroup, description: str, *fields: ArgumentField
) -> OperationDescriptor:
    return OperationDescriptor(
        name=name,
        kind=OperationKind.QUERY,
        target=target,
        fields=_base_fields(target, fields),
        description=description,
        ignored=_ignored(target, fields),
    )


def _mutation(
    name: str, target: TargetGroup, description: str, *fields: ArgumentField
) -> OperationDescriptor:
    return OperationDescriptor(
        name=name,
        kind=OperationKind.MUTATION,
        target=target,
        fields=_base_fields(target, fields),
        description=description,
        ignored=_ignored(target, fields),
        strict=True,
    )


_TOKEN_ID = "Token ID"

_DESCRIPTORS: tuple[OperationDescriptor, ...] = (
    # ------------------------------------------------------------------
    # Unlock factory: reads
    # ------------------------------------------------------------------
    _query("chainIdRead", FACTORY, "Get the chain ID for the current network"),
    _query("unlockVersion", FACTORY, "Get the current version of the Unlock protocol"),
    _query("governanceToken", FACTORY, "Get the UDT governance token address"),
    _query("getGlobalTokenSymbol", FACTORY, "Get the global token symbol for the protocol"),
    _query(
        "publicLockLatestVersion",
        FACTORY,
        "Get the latest PublicLock template version number",
    ),
    # ------------------------------------------------------------------
    # Unlock factory: writes
    # ------------------------------------------------------------------
    _mutation(
        "createLock",
        FACTORY,
        "Deploy a new PublicLock contract",
        uint("_expirationDuration", "Duration in seconds for key validity"),
        address("_tokenAddress", "Payment token address (0x0 for ETH)"),
        uint("_keyPrice", "Price per key in wei"),
        uint("_maxNumberOfKeys", "Maximum number of keys (0 for unlimited)"),
        text("_lockName", "Name of the lock"),
        hexbytes(
            "_salt",
            "Deployment salt (defaults to zero)",
            required=False,
            size=12,
            default="0x" + "00" * 12,
        ),
    ),
    _mutation(
        "createUpgradeableLock",
        FACTORY,
        "Deploy a new upgradeable PublicLock contract with initialization data",
        hexbytes("data", "Initialization data for the lock contract"),
    ),
    _mutation(
        "upgradeLock",
        FACTORY,
        "Upgrade a lock contract to a new version",
        address("lockAddress", "Address of the lock to upgrade"),
        uint("version", "Version number to upgrade to"),
    ),
    # ------------------------------------------------------------------
    # PublicLock: ERC721 reads
    # ------------------------------------------------------------------
    _query(
        "balanceOf",
        INSTANCE,
        "Get the number of keys owned by an address",
        address("_keyOwner", "Address to check balance for"),
    ),
    _query(
        "getApproved",
        INSTANCE,
        "Get the approved address for a specific token",
        uint("_tokenId", "Token ID to check approval for"),
    ),
    _query(
        "ownerOf",
        INSTANCE,
        "Get the owner of a specific token",
        uint("_tokenId", "Token ID to get owner for"),
    ),
    _query(
        "tokenByIndex",
        INSTANCE,
        "Get token ID by index in total supply",
        uint("_index", "Index in total supply"),
    ),
    _query(
        "tokenOfOwnerByIndex",
        INSTANCE,
        "Get token ID by owner and index",
        address("_keyOwner", "Owner address"),
        uint("_index", "Index in owner's tokens"),
    ),
    _query(
        "tokenURI",
        INSTANCE,
        "Get metadata URI for a token",
        uint("_tokenId", "Token ID to get URI for"),
    ),
    _query("totalSupply", INSTANCE, "Get total number of keys created"),
    _query(
        "supportsInterface",
        INSTANCE,
        "Check if contract supports a specific interface",
        hexbytes("interfaceId", "Interface ID to check", size=4),
    ),
    # ------------------------------------------------------------------
    # PublicLock: configuration reads
    # ------------------------------------------------------------------
    _query("expirationDuration", INSTANCE, "Get duration keys are valid for"),
    _query("freeTrialLength", INSTANCE, "Get free trial period length"),
    _query("gasRefundValue", INSTANCE, "Get gas refund amount paid on purchase"),
    _query("keyPrice", INSTANCE, "Get current key price"),
    _query("maxKeysPerAddress", INSTANCE, "Get maximum keys per address"),
    _query("maxNumberOfKeys", INSTANCE, "Get maximum number of keys"),
    _query("name", INSTANCE, "Get lock name"),
    _query("numberOfOwners", INSTANCE, "Get number of unique key owners"),
    _query("publicLockVersion", INSTANCE, "Get PublicLock contract version"),
    _query("refundPenaltyBasisPoints", INSTANCE, "Get refund penalty in basis points"),
    _query("symbol", INSTANCE, "Get lock symbol"),
    _query("tokenAddress", INSTANCE, "Get payment token address"),
    _query("transferFeeBasisPoints", INSTANCE, "Get transfer fee in basis points"),
    _query("unlockProtocol", INSTANCE, "Get the Unlock factory this lock belongs to"),
    # ------------------------------------------------------------------
    # PublicLock: key status reads
    # ------------------------------------------------------------------
    _query(
        "getHasValidKey",
        INSTANCE,
        "Check if address has a valid key",
        address("_keyOwner", "Address to check"),
    ),
    _query(
        "isValidKey",
        INSTANCE,
        "Check if token ID is a valid key",
        uint("_tokenId", "Token ID to check"),
    ),
    _query(
        "keyExpirationTimestampFor",
        INSTANCE,
        "Get expiration timestamp for a key",
        uint("_tokenId", _TOKEN_ID),
    ),
    _query(
        "keyManagerOf",
        INSTANCE,
        "Get key manager for a token",
        uint("_tokenId", _TOKEN_ID),
    ),
    _query(
        "totalKeys",
        INSTANCE,
        "Get total keys owned by address",
        address("_keyOwner", "Owner address"),
    ),
    _query(
        "isRenewable",
        INSTANCE,
        "Check whether a key can be renewed",
        uint("_tokenId", _TOKEN_ID),
        address("_referrer", "Referrer address"),
    ),
    # ------------------------------------------------------------------
    # PublicLock: pricing reads
    # ------------------------------------------------------------------
    _query(
        "getCancelAndRefundValue",
        INSTANCE,
        "Get refund amount for cancelling a key",
        uint("_tokenId", _TOKEN_ID),
    ),
    _query(
        "getTransferFee",
        INSTANCE,
        "Get fee for transferring a key",
        uint("_tokenId", _TOKEN_ID),
        uint("_time", "Time to transfer (seconds)"),
    ),
    _query(
        "purchasePriceFor",
        INSTANCE,
        "Get purchase price for recipient",
        address("_recipient", "Recipient address"),
        address("_referrer", "Referrer address"),
        hexbytes("_data", "Additional data"),
    ),
    _query(
        "referrerFees",
        INSTANCE,
        "Get the fee share configured for a referrer",
        address("_referrer", "Referrer address"),
    ),
    # ------------------------------------------------------------------
    # PublicLock: access control reads
    # ------------------------------------------------------------------
    _query(
        "hasRole",
        INSTANCE,
        "Check if account has specific role",
        hexbytes("role", "Role identifier", size=32),
        address("account", "Account to check"),
    ),
    _query(
        "isLockManager",
        INSTANCE,
        "Check if account is lock manager",
        address("account", "Account to check"),
    ),
    _query(
        "isOwner",
        INSTANCE,
        "Check if account is lock owner",
        address("account", "Account to check"),
    ),
    _query("owner", INSTANCE, "Get lock owner address"),
    # ------------------------------------------------------------------
    # PublicLock: purchase writes
    # ------------------------------------------------------------------
    _mutation(
        "purchase",
        INSTANCE,
        "Purchase keys for multiple recipients",
        uint("_values", "Payment amounts for each key", sequence=True),
        address("_recipients", "Recipient addresses", sequence=True),
        address("_referrers", "Referrer addresses", sequence=True),
        address("_keyManagers", "Key manager addresses", sequence=True),
        hexbytes("_data", "Additional data for each purchase", sequence=True),
    ),
    _mutation(
        "extend",
        INSTANCE,
        "Extend key duration",
        uint("_value", "Payment amount"),
        uint("_tokenId", "Token ID to extend"),
        address("_referrer", "Referrer address"),
        hexbytes("_data", "Additional data"),
    ),
    _mutation(
        "renewMembershipFor",
        INSTANCE,
        "Renew a recurring membership",
        uint("_tokenId", "Token ID to renew"),
        address("_referrer", "Referrer address"),
    ),
    # ------------------------------------------------------------------
    # PublicLock: key management writes
    # ------------------------------------------------------------------
    _mutation(
        "grantKeys",
        INSTANCE,
        "Grant keys to recipients",
        address("_recipients", "Recipient addresses", sequence=True),
        uint("_expirationTimestamps", "Expiration timestamps", sequence=True),
        address("_keyManagers", "Key manager addresses", sequence=True),
    ),
    _mutation(
        "grantKeyExtension",
        INSTANCE,
        "Extend a key without payment",
        uint("_tokenId", _TOKEN_ID),
        uint("_duration", "Extension duration in seconds"),
    ),
    _mutation(
        "setKeyExpiration",
        INSTANCE,
        "Set key expiration time",
        uint("_tokenId", _TOKEN_ID),
        uint("_newExpiration", "New expiration timestamp"),
    ),
    _mutation(
        "setKeyManagerOf",
        INSTANCE,
        "Set the key manager of a token",
        uint("_tokenId", _TOKEN_ID),
        address("_keyManager", "New key manager address"),
    ),
    # ------------------------------------------------------------------
    # PublicLock: transfer writes
    # ------------------------------------------------------------------
    _mutation(
        "approve",
        INSTANCE,
        "Approve address to transfer token",
        address("_approved", "Address to approve"),
        uint("_tokenId", "Token ID to approve"),
    ),
    _mutation(
        "transferFrom",
        INSTANCE,
        "Transfer key between addresses",
        address("_from", "Current owner address"),
        address("_to", "Recipient address"),
        uint("_tokenId", "Token ID to transfer"),
    ),
    _mutation(
        "safeTransferFrom",
        INSTANCE,
        "Safely transfer key between addresses",
        address("_from", "Current owner address"),
        address("_to", "Recipient address"),
        uint("_tokenId", "Token ID to transfer"),
        hexbytes("_data", "Data passed to the receiver", required=False),
    ),
    _mutation(
        "lendKey",
        INSTANCE,
        "Lend a key to another address",
        address("_from", "Current owner address"),
        address("_recipient", "Borrower address"),
        uint("_tokenId", "Token ID to lend"),
    ),
    _mutation(
        "unlendKey",
        INSTANCE,
        "Take back a lent key",
        address("_recipient", "Address to return the key to"),
        uint("_tokenId", "Token ID to unlend"),
    ),
    _mutation(
        "shareKey",
        INSTANCE,
        "Share part of a key's remaining time",
        address("_to", "Recipient address"),
        uint("_tokenIdFrom", "Token ID to share time from"),
        uint("_timeShared", "Time to share in seconds"),
    ),
    _mutation(
        "mergeKeys",
        INSTANCE,
        "Move time from one key to another",
        uint("_tokenIdFrom", "Token ID to take time from"),
        uint("_tokenIdTo", "Token ID to add time to"),
        uint("_amount", "Amount of time in seconds"),
    ),
    # ------------------------------------------------------------------
    # PublicLock: refund / burn writes
    # ------------------------------------------------------------------
    _mutation(
        "cancelAndRefund",
        INSTANCE,
        "Cancel key and get refund",
        uint("_tokenId", "Token ID to cancel"),
    ),
    _mutation(
        "expireAndRefundFor",
        INSTANCE,
        "Expire a key and refund an amount to its owner",
        uint("_tokenId", _TOKEN_ID),
        uint("_amount", "Refund amount"),
    ),
    _mutation(
        "burn",
        INSTANCE,
        "Burn a key",
        uint("_tokenId", "Token ID to burn"),
    ),
    # ------------------------------------------------------------------
    # PublicLock: configuration writes
    # ------------------------------------------------------------------
    _mutation(
        "updateKeyPricing",
        INSTANCE,
        "Update key price and payment token",
        uint("_keyPrice", "New key price"),
        address("_tokenAddress", "Payment token address"),
    ),
    _mutation(
        "updateLockConfig",
        INSTANCE,
        "Update lock configuration",
        uint("_newExpirationDuration", "New expiration duration"),
        uint("_maxNumberOfKeys", "Maximum number of keys"),
        uint("_maxKeysPerAccount", "Maximum keys per account"),
    ),
    _mutation(
        "updateRefundPenalty",
        INSTANCE,
        "Update free trial length and refund penalty",
        uint("_freeTrialLength", "Free trial length in seconds"),
        uint("_refundPenaltyBasisPoints", "Refund penalty in basis points"),
    ),
    _mutation(
        "updateTransferFee",
        INSTANCE,
        "Update the key transfer fee",
        uint("_transferFeeBasisPoints", "Transfer fee in basis points"),
    ),
    _mutation(
        "setLockMetadata",
        INSTANCE,
        "Set lock name, symbol, and base URI",
        text("_lockName", "Lock name"),
        text("_lockSymbol", "Lock symbol"),
        text("_baseTokenURI", "Base token URI"),
    ),
    _mutation(
        "setReferrerFee",
        INSTANCE,
        "Set referrer fee percentage",
        address("_referrer", "Referrer address"),
        uint("_feeBasisPoint", "Fee in basis points"),
    ),
    _mutation(
        "setGasRefundValue",
        INSTANCE,
        "Set the gas refund paid on purchase",
        uint("_refundValue", "Refund amount in wei"),
    ),
    _mutation(
        "setEventHooks",
        INSTANCE,
        "Set the lock's event hook contracts",
        address("_onKeyPurchaseHook", "Key purchase hook"),
        address("_onKeyCancelHook", "Key cancel hook"),
        address("_onValidKeyHook", "Valid key hook"),
        address("_onTokenURIHook", "Token URI hook"),
        address("_onKeyTransferHook", "Key transfer hook"),
        address("_onKeyExtendHook", "Key extend hook"),
        address("_onKeyGrantHook", "Key grant hook"),
        address("_onHasRoleHook", "Has role hook"),
    ),
    _mutation(
        "migrate",
        INSTANCE,
        "Run the lock's data migration after an upgrade",
        hexbytes("data", "Migration data"),
    ),
    _mutation(
        "withdraw",
        INSTANCE,
        "Withdraw funds from lock",
        address("_tokenAddress", "Token to withdraw (0x0 for ETH)"),
        address("_recipient", "Recipient address"),
        uint("_amount", "Amount to withdraw"),
    ),
    # ------------------------------------------------------------------
    # PublicLock: access control writes
    # ------------------------------------------------------------------
    _mutation(
        "grantRole",
        INSTANCE,
        "Grant role to account",
        hexbytes("role", "Role identifier", size=32),
        address("account", "Account to grant role to"),
    ),
    _mutation(
        "renounceRole",
        INSTANCE,
        "Renounce a role held by the caller",
        hexbytes("role", "Role identifier", size=32),
        address("account", "Account renouncing the role"),
    ),
    _mutation(
        "revokeRole",
        INSTANCE,
        "Revoke role from account",
        hexbytes("role", "Role identifier", size=32),
        address("account", "Account to revoke role from"),
    ),
    _mutation("renounceLockManager", INSTANCE, "Give up the caller's lock manager role"),
    _mutation(
        "setOwner",
        INSTANCE,
        "Set the lock owner",
        address("account", "New owner address"),
    ),
)


def _index(descriptors: tuple[OperationDescriptor, ...]) -> Mapping[str, OperationDescriptor]:
    index: dict[str, OperationDescriptor] = {}
    for descriptor in descriptors:
        if descriptor.name in index:
            raise ValueError(f"Duplicate operation name '{descriptor.name}'")
        index[descriptor.name] = descriptor
    return MappingProxyType(index)


CATALOGUE: Mapping[str, OperationDescriptor] = _index(_DESCRIPTORS)


def lookup(name: str) -> OperationDescriptor | None:
    """Return the descriptor for an operation name, or None."""
    return CATALOGUE.get(name)


def operation_names() -> frozenset[str]:
    return frozenset(CATALOGUE)


def list_operations() -> list[dict[str, Any]]:
    """Catalogue listing for discovery: name, description and input schema."""
    return [
        {
            "name": d.name,
            "description": d.description,
            "inputSchema": json_schema(d),
        }
        for d in _DESCRIPTORS
    ]
