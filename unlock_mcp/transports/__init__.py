from .formatting import outcome_json, outcome_text, transaction_json
from .http import create_app
from .stdio import StdioServer

__all__ = ["StdioServer", "create_app", "outcome_json", "outcome_text", "transaction_json"]
