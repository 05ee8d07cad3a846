"""Operation catalogue, argument validation and read/write classification."""
from .catalogue import CATALOGUE, list_operations, lookup, operation_names
from .classifier import check_partition, classify
from .fields import SUPPORTED_CHAIN_IDS, validate

__all__ = [
    "CATALOGUE",
    "SUPPORTED_CHAIN_IDS",
    "check_partition",
    "classify",
    "list_operations",
    "lookup",
    "operation_names",
    "validate",
]
