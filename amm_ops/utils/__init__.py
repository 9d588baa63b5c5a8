"""Utility functions for math, gas and transactions"""

from .math import encode_price_sqrt, sort_tokens, parse_units, format_units
from .transactions import TransactionBuilder, call, check_receipt

__all__ = [
    "encode_price_sqrt",
    "sort_tokens",
    "parse_units",
    "format_units",
    "TransactionBuilder",
    "call",
    "check_receipt",
]
