"""Argument field types, validation and JSON Schema rendering."""
from __future__ import annotations

import re
from typing import Any

from ..errors import InvalidArguments
from ..models import ArgumentField, FieldType, OperationDescriptor

SUPPORTED_CHAIN_IDS: tuple[int, ...] = (8453, 84532)

ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"
UINT_PATTERN = r"^[0-9]+$"
BYTES_PATTERN = r"^0x([a-fA-F0-9]{2})*$"

_ADDRESS_RE = re.compile(ADDRESS_PATTERN)
_UINT_RE = re.compile(UINT_PATTERN)
_BYTES_RE = re.compile(BYTES_PATTERN)

# ---------------------------------------------------------------------------
# Field constructors
# ---------------------------------------------------------------------------


def address(name: str, description: str = "", **kwargs: Any) -> ArgumentField:
    return ArgumentField(name, FieldType.ADDRESS, description=description, **kwargs)


def uint(name: str, description: str = "", **kwargs: Any) -> ArgumentField:
    return ArgumentField(name, FieldType.UINT, description=description, **kwargs)


def hexbytes(name: str, description: str = "", **kwargs: Any) -> ArgumentField:
    return ArgumentField(name, FieldType.BYTES, description=description, **kwargs)


def text(name: str, description: str = "", **kwargs: Any) -> ArgumentField:
    return ArgumentField(name, FieldType.TEXT, description=description, **kwargs)


CHAIN_ID = ArgumentField(
    "chainId",
    FieldType.CHAIN_ID,
    passed=False,
    description="Chain ID (Base=8453, Base-Sepolia=84532)",
)

LOCK_ADDRESS = address(
    "lockAddress",
    "Lock contract address (defaults to the configured lock)",
    required=False,
    passed=False,
)

# Accepted on factory operations so callers may send a uniform payload; the
# factory address is always used instead.
IGNORED_LOCK_ADDRESS = "lockAddress"
IGNORED_LOCK_ADDRESS_DESCRIPTION = "Ignored: factory functions always target the Unlock contract"

# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _check_scalar(f: ArgumentField, value: Any) -> str | None:
    """Return the reason ``value`` is invalid for ``f``, or None."""
    if f.type is FieldType.CHAIN_ID:
        if isinstance(value, bool) or not isinstance(value, int):
            return "must be a number"
        if value not in SUPPORTED_CHAIN_IDS:
            supported = ", ".join(str(c) for c in SUPPORTED_CHAIN_IDS)
            return f"unsupported chain {value} (expected one of {supported})"
        return None

    if not isinstance(value, str):
        return "must be a string"

    if f.type is FieldType.ADDRESS:
        if not _ADDRESS_RE.fullmatch(value):
            return "Invalid Ethereum address"
    elif f.type is FieldType.UINT:
        if not _UINT_RE.fullmatch(value):
            return "Must be a positive integer"
    elif f.type is FieldType.BYTES:
        if not _BYTES_RE.fullmatch(value):
            return "Invalid bytes format"
        if f.size is not None and len(value) != 2 + 2 * f.size:
            return f"must be exactly {f.size} bytes"
    return None


def check_value(f: ArgumentField, value: Any) -> str | None:
    if not f.sequence:
        return _check_scalar(f, value)

    if not isinstance(value, list):
        return "must be an array"
    for index, item in enumerate(value):
        reason = _check_scalar(f, item)
        if reason:
            return f"element {index}: {reason}"
    return None


def validate(descriptor: OperationDescriptor, raw: Any) -> dict[str, Any]:
    """Validate raw arguments against a descriptor's schema.

    Returns the validated fields in schema order. Raises InvalidArguments
    listing every violation.
    """
    if not isinstance(raw, dict):
        raise InvalidArguments(descriptor.name, [("arguments", "must be an object")])

    violations: list[tuple[str, str]] = []
    validated: dict[str, Any] = {}

    for f in descriptor.fields:
        value = raw.get(f.name)
        if value is None:
            if f.default is not None:
                validated[f.name] = f.default
            elif f.required:
                violations.append((f.name, "Required"))
            continue
        reason = check_value(f, value)
        if reason:
            violations.append((f.name, reason))
            continue
        validated[f.name] = list(value) if f.sequence else value

    if descriptor.strict:
        for key in raw:
            if key not in descriptor.ignored and descriptor.field(key) is None:
                violations.append((key, "Unrecognized field"))

    if violations:
        raise InvalidArguments(descriptor.name, violations)
    return validated


# ---------------------------------------------------------------------------
# JSON Schema
# ---------------------------------------------------------------------------


def _scalar_schema(f: ArgumentField) -> dict[str, Any]:
    if f.type is FieldType.CHAIN_ID:
        return {"type": "number", "enum": list(SUPPORTED_CHAIN_IDS)}
    if f.type is FieldType.ADDRESS:
        return {"type": "string", "pattern": ADDRESS_PATTERN}
    if f.type is FieldType.UINT:
        return {"type": "string", "pattern": UINT_PATTERN}
    if f.type is FieldType.BYTES:
        if f.size is not None:
            return {"type": "string", "pattern": f"^0x[a-fA-F0-9]{{{2 * f.size}}}$"}
        return {"type": "string", "pattern": BYTES_PATTERN}
    return {"type": "string"}


def field_schema(f: ArgumentField) -> dict[str, Any]:
    schema = _scalar_schema(f)
    if f.sequence:
        schema = {"type": "array", "items": schema}
    if f.description:
        schema["description"] = f.description
    return schema


def json_schema(descriptor: OperationDescriptor) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "type": "object",
        "properties": {f.name: field_schema(f) for f in descriptor.fields},
        "required": [f.name for f in descriptor.fields if f.required],
    }
    for key in sorted(descriptor.ignored):
        schema["properties"][key] = {"description": IGNORED_LOCK_ADDRESS_DESCRIPTION}
    if descriptor.strict:
        schema["additionalProperties"] = False
    return schema
