"""Contract interface definitions — ABI loading, calldata encoding, result decoding."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_utils import decode_hex, keccak, to_checksum_address

from ..errors import InterfaceMismatch
from ..models import TargetGroup

logger = logging.getLogger(__name__)

# ABI file directory
ABI_DIR = Path(__file__).parent / "abis"

DEFAULT_ABI_FILES: dict[TargetGroup, Path] = {
    TargetGroup.FACTORY: ABI_DIR / "unlock.json",
    TargetGroup.INSTANCE: ABI_DIR / "public_lock.json",
}


def load_abi(path: str | Path) -> list[dict[str, Any]]:
    """Read an ABI file. Accepts a bare array or a build artifact with an ``abi`` key."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(payload, dict) and "abi" in payload:
        payload = payload["abi"]
    if not isinstance(payload, list):
        raise ValueError(f"ABI payload in {path} must be an array")
    return payload


class InterfaceRegistry:
    """Function entries of the factory and instance interfaces, by method name."""

    def __init__(self, abis: Mapping[TargetGroup, list[dict[str, Any]]]) -> None:
        self._functions: dict[TargetGroup, dict[str, tuple[dict[str, Any], ...]]] = {}
        for group, abi in abis.items():
            by_name: dict[str, list[dict[str, Any]]] = {}
            for entry in abi:
                if entry.get("type") != "function":
                    continue
                by_name.setdefault(entry["name"], []).append(entry)
            self._functions[group] = {k: tuple(v) for k, v in by_name.items()}

    @classmethod
    def from_files(
        cls,
        factory_path: str | Path | None = None,
        instance_path: str | Path | None = None,
    ) -> InterfaceRegistry:
        paths = {
            TargetGroup.FACTORY: factory_path or DEFAULT_ABI_FILES[TargetGroup.FACTORY],
            TargetGroup.INSTANCE: instance_path or DEFAULT_ABI_FILES[TargetGroup.INSTANCE],
        }
        abis = {}
        for group, path in paths.items():
            abis[group] = load_abi(path)
            logger.debug("Loaded %s interface from %s", group.value, path)
        return cls(abis)

    def functions(self, interface: TargetGroup, method: str) -> tuple[dict[str, Any], ...]:
        return self._functions.get(interface, {}).get(method, ())

    def select(
        self, interface: TargetGroup, method: str, names: Iterable[str]
    ) -> dict[str, Any]:
        """Pick the overload whose parameter names are exactly ``names``."""
        candidates = self.functions(interface, method)
        if not candidates:
            raise InterfaceMismatch(f"Function {method} not found on contract")

        supplied = set(names)
        for entry in candidates:
            if {inp.get("name", "") for inp in entry.get("inputs", [])} == supplied:
                return entry

        raise InterfaceMismatch(
            f"No {method} signature takes ({', '.join(sorted(supplied))})"
        )


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


def canonical_type(param: Mapping[str, Any]) -> str:
    abi_type = param["type"]
    if abi_type.startswith("tuple"):
        inner = ",".join(canonical_type(c) for c in param.get("components", []))
        return f"({inner}){abi_type[len('tuple'):]}"
    return abi_type


def signature(entry: Mapping[str, Any]) -> str:
    types = ",".join(canonical_type(p) for p in entry.get("inputs", []))
    return f"{entry['name']}({types})"


def selector(entry: Mapping[str, Any]) -> bytes:
    return keccak(text=signature(entry))[:4]


def _coerce(abi_type: str, value: Any) -> Any:
    """Convert a validated JSON value into what eth_abi expects for ``abi_type``."""
    if abi_type.endswith("]"):
        base = abi_type[: abi_type.rindex("[")]
        return [_coerce(base, item) for item in value]
    if abi_type.startswith(("uint", "int")):
        return int(value)
    if abi_type == "address":
        return to_checksum_address(value)
    if abi_type.startswith("bytes"):
        return decode_hex(value)
    return value


def encode_call(entry: Mapping[str, Any], args: Iterable[Any]) -> str:
    """Encode calldata (selector + arguments) as a 0x-prefixed hex string."""
    types = [canonical_type(p) for p in entry.get("inputs", [])]
    values = [_coerce(t, v) for t, v in zip(types, args)]
    return "0x" + (selector(entry) + abi_encode(types, values)).hex()


def _normalize(abi_type: str, value: Any) -> Any:
    if abi_type.endswith("]"):
        base = abi_type[: abi_type.rindex("[")]
        return [_normalize(base, item) for item in value]
    if abi_type == "address":
        return to_checksum_address(value)
    return value


def decode_result(entry: Mapping[str, Any], data: bytes) -> Any:
    """Decode return data. Single outputs are unwrapped; none decode to None."""
    types = [canonical_type(p) for p in entry.get("outputs", [])]
    if not types:
        return None
    values = [_normalize(t, v) for t, v in zip(types, abi_decode(types, data))]
    if len(values) == 1:
        return values[0]
    return tuple(values)


def stringify(value: Any) -> str:
    """Render a decoded value as text without losing integer precision."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item) for item in value)
    return str(value)
