"""Contract interfaces, target resolution and call planning."""
from .abi import InterfaceRegistry, stringify
from .builder import CallBuilder
from .resolver import Resolver

__all__ = ["CallBuilder", "InterfaceRegistry", "Resolver", "stringify"]
