"""Per-run operation settings"""

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Optional, Tuple


@dataclass(frozen=True)
class OperationSettings:
    """
    Everything an operation needs to know about how it was invoked.

    Built once from the command line and handed to the runner; operations
    read it but never change it. None means "use the operation's default".
    """

    network: Optional[str] = None
    deployments: str = "deployments"
    manifest: Optional[str] = None
    gas_config: Optional[str] = None
    rpc_url: Optional[str] = None
    strict: bool = False
    verbose: bool = False

    # Position selection
    token_id: Optional[int] = None

    # Amounts in whole tokens (converted with the token's decimals)
    amount: Optional[Decimal] = None
    amount0: Optional[Decimal] = None
    amount1: Optional[Decimal] = None
    min_out: Optional[Decimal] = None

    # Pool parameters
    fee: Optional[int] = None
    price: Optional[Decimal] = None
    tick_lower: Optional[int] = None
    tick_upper: Optional[int] = None
    percentage: Optional[Decimal] = None
    deadline_minutes: Optional[int] = None

    recipient: Optional[str] = None
    reverse: bool = False
    blocks: Optional[int] = None
    tokens_from: Optional[str] = None
    weth: Optional[str] = None

    # Token deployment: ((name, symbol), (name, symbol))
    token_names: Optional[Tuple[Tuple[str, str], ...]] = None
    supply: Optional[Decimal] = None
    decimals: Optional[int] = None

    # openTrading arguments
    token: Optional[str] = None
    output_roots: Optional[Tuple[str, ...]] = None
    l2_block_number: Optional[int] = None
    new_limit: Optional[int] = None

    @classmethod
    def from_args(cls, args):
        """Build settings from an argparse namespace, ignoring unknown attributes"""
        names = {f.name for f in fields(cls)}
        values = {}
        for name, value in vars(args).items():
            if name not in names or value is None:
                continue
            if name == "token_names":
                value = tuple(tuple(pair) for pair in value)
            elif name == "output_roots":
                value = tuple(value)
            values[name] = value
        return cls(**values)
