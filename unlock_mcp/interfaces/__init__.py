"""Protocol interfaces for the Unlock gateway."""
from .chain import ChainClient

__all__ = ["ChainClient"]
