"""Dispatch error taxonomy."""
from __future__ import annotations

from .models import FailureKind


class DispatchError(Exception):
    """Base class for errors that terminate a single request."""

    kind = FailureKind.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownOperation(DispatchError):
    kind = FailureKind.UNKNOWN_OPERATION

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown function: {name}")
        self.name = name


class InvalidArguments(DispatchError):
    kind = FailureKind.INVALID_ARGUMENTS

    def __init__(self, operation: str, violations: list[tuple[str, str]]) -> None:
        details = "; ".join(f"{name}: {reason}" for name, reason in violations)
        super().__init__(f"Invalid arguments for {operation}: {details}")
        self.violations = tuple(violations)


class UnclassifiedOperation(DispatchError):
    kind = FailureKind.UNCLASSIFIED

    def __init__(self, name: str) -> None:
        super().__init__(f"Function {name} is not categorized as read or write")


class UnresolvedTarget(DispatchError):
    kind = FailureKind.UNRESOLVED_TARGET


class UnsupportedChain(DispatchError):
    kind = FailureKind.UNSUPPORTED_CHAIN

    def __init__(self, chain_id: int) -> None:
        super().__init__(f"Unsupported chain ID: {chain_id}")
        self.chain_id = chain_id


class ChainCallFailed(DispatchError):
    kind = FailureKind.CHAIN_CALL_FAILED


class InterfaceMismatch(DispatchError):
    """Validated fields do not line up with the interface definition."""
