"""Data models — all frozen (immutable)."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Union


class OperationKind(enum.Enum):
    QUERY = "query"
    MUTATION = "mutation"
    UNKNOWN = "unknown"


class TargetGroup(enum.Enum):
    """Interface family an operation belongs to."""

    FACTORY = "factory"
    INSTANCE = "instance"


class FieldType(enum.Enum):
    ADDRESS = "address"
    UINT = "uint"
    BYTES = "bytes"
    CHAIN_ID = "chain_id"
    TEXT = "text"


class Execution(enum.Enum):
    """Executable form of a call plan."""

    READ = "read"
    SUBMIT = "submit"
    ENCODE = "encode"


class FailureKind(enum.Enum):
    UNKNOWN_OPERATION = "UnknownOperation"
    INVALID_ARGUMENTS = "InvalidArguments"
    UNCLASSIFIED = "UnclassifiedOperation"
    UNRESOLVED_TARGET = "UnresolvedTarget"
    UNSUPPORTED_CHAIN = "UnsupportedChain"
    CHAIN_CALL_FAILED = "ChainCallFailed"
    INTERNAL = "Internal"


@dataclass(frozen=True)
class ArgumentField:
    """A named, typed operation parameter."""

    name: str
    type: FieldType
    required: bool = True
    sequence: bool = False
    # False for bookkeeping fields that never reach the contract call.
    passed: bool = True
    # Exact byte length for fixed-size byte strings (bytes4, bytes32, ...).
    size: int | None = None
    # Filled in by validation when an optional field is omitted.
    default: Any = None
    description: str = ""


@dataclass(frozen=True)
class OperationDescriptor:
    """One supported contract function."""

    name: str
    kind: OperationKind
    target: TargetGroup
    fields: tuple[ArgumentField, ...]
    description: str = ""
    # Strict schemas reject fields they do not enumerate.
    strict: bool = False
    # Keys accepted for payload uniformity and dropped unchecked.
    ignored: frozenset[str] = frozenset()

    def field(self, name: str) -> ArgumentField | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def call_fields(self) -> tuple[ArgumentField, ...]:
        return tuple(f for f in self.fields if f.passed)


@dataclass(frozen=True)
class ResolvedTarget:
    address: str
    interface: TargetGroup


@dataclass(frozen=True)
class CallPlan:
    """Fully resolved, ready-to-execute description of one contract interaction."""

    target: ResolvedTarget
    operation: str
    method: str
    function: dict[str, Any]
    arguments: tuple[Any, ...]
    data: str
    kind: OperationKind
    execution: Execution

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return tuple(inp.get("name", "") for inp in self.function.get("inputs", []))


@dataclass(frozen=True)
class Capabilities:
    """What the bound transport can do with a mutation."""

    can_submit: bool = False


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QueryResult:
    result: str


@dataclass(frozen=True)
class UnsignedTransaction:
    to: str
    data: str
    chain_id: int
    value: str = "0"


@dataclass(frozen=True)
class TransactionReceipt:
    transaction_hash: str
    block_number: int
    gas_used: int


Payload = Union[QueryResult, UnsignedTransaction, TransactionReceipt]


@dataclass(frozen=True)
class Success:
    operation: str
    chain_id: int
    payload: Payload


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str
    violations: tuple[tuple[str, str], ...] = field(default=())


Outcome = Union[Success, Failure]
