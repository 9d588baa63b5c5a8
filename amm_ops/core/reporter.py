"""Console reporting for operations"""

import sys

from .exceptions import RemoteRejectionError, TransactionError
from .logs import get_logger

logger = get_logger(__name__)

WIDTH = 60


class Reporter:
    """Prints operation progress and results; warnings go through logging"""

    def __init__(self, out=None, err=None):
        self.out = out or sys.stdout
        self.err = err or sys.stderr
        self.warnings = []

    def _print(self, text="", err=False):
        print(text, file=self.err if err else self.out)

    def banner(self, title):
        self._print("=" * WIDTH)
        self._print(title)
        self._print("=" * WIDTH)

    def section(self, title):
        self._print(f"\n{title}")
        self._print("-" * WIDTH)

    def step(self, message):
        self._print(f"\n> {message}")

    def info(self, message):
        self._print(f"  {message}")

    def kv(self, label, value):
        self._print(f"  {label + ':':<22} {value}")

    def success(self, message):
        self._print(f"\n{message}")

    def tx(self, label, receipt):
        """Print the hash and gas of a mined transaction"""
        tx_hash = receipt["transactionHash"]
        if hasattr(tx_hash, "hex"):
            tx_hash = tx_hash.hex()
        self.kv(f"{label} tx", tx_hash)
        gas_used = receipt.get("gasUsed") if hasattr(receipt, "get") else None
        if gas_used is not None:
            self.kv("Gas used", f"{gas_used:,}")

    def warning(self, message):
        self.warnings.append(message)
        logger.warning(message)

    def failure(self, exc):
        """Print an error and any decoded revert fields to stderr"""
        self._print(f"\nError: {exc}", err=True)

        if isinstance(exc, RemoteRejectionError):
            for key, value in exc.details().items():
                self._print(f"  {key}: {value}", err=True)
        if isinstance(exc, TransactionError) and exc.tx_hash:
            self._print(f"  transaction: {exc.tx_hash}", err=True)
