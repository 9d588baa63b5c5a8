"""Custom exceptions for AMM Ops"""


class AMMError(Exception):
    """Base exception for all AMM errors"""
    pass


class ConfigError(AMMError):
    """Configuration-related errors"""
    pass


class MissingManifestError(ConfigError, FileNotFoundError):
    """A deployment manifest the operation depends on was never written"""
    pass


class MissingContractError(ConfigError, KeyError):
    """A contract role is absent from the manifest and has no network default"""

    def __str__(self):
        # KeyError would otherwise wrap the message in quotes
        return str(self.args[0]) if self.args else ""


class ArtifactError(ConfigError):
    """Compiled contract artifact missing or unusable"""
    pass


class ConnectionError(AMMError):
    """Web3 connection errors"""
    pass


class TransactionError(AMMError):
    """Transaction execution errors (mined but reverted)"""

    def __init__(self, message, tx_hash=None, receipt=None):
        super().__init__(message)
        self.tx_hash = tx_hash
        self.receipt = receipt


class RemoteRejectionError(TransactionError):
    """
    The remote contract rejected a call or transaction.

    Carries whatever could be decoded from the revert payload.
    """

    def __init__(self, message, reason=None, error_name=None, error_args=None, data=None):
        super().__init__(message)
        self.reason = reason
        self.error_name = error_name
        self.error_args = error_args
        self.data = data

    def details(self):
        """Decoded diagnostic fields, skipping the ones that are unknown"""
        fields = {
            "reason": self.reason,
            "error": self.error_name,
            "args": self.error_args,
            "data": self.data,
        }
        return {k: v for k, v in fields.items() if v not in (None, (), [])}


class InsufficientBalanceError(AMMError):
    """Insufficient token balance"""
    pass


class PositionError(AMMError):
    """Position-related errors (not found, not owned, etc.)"""
    pass


class PoolError(AMMError):
    """Pool-related errors (not found, not initialized, etc.)"""
    pass


class VerificationError(AMMError):
    """Post-transaction check found a different amount than expected"""
    pass
