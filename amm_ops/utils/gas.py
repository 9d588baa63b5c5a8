"""EIP-1559 gas management with user-configurable limits"""

import json
from decimal import Decimal
from pathlib import Path

from web3 import Web3
from web3.exceptions import ContractLogicError, Web3Exception

from ..core.exceptions import AMMError, ConfigError
from ..core.logs import get_logger
from .reverts import to_remote_rejection

logger = get_logger(__name__)


class GasPriceTooHighError(AMMError):
    """Raised when current base fee exceeds the configured maximum"""
    pass


class GasConfig:
    """Load and manage gas configuration from JSON file"""

    # Fallback limits when estimation is unavailable
    DEFAULT_GAS_LIMITS = {
        "approve": 65000,
        "transfer": 65000,
        "deploy": 5000000,
        "createPool": 5000000,
        "initialize": 200000,
        "mint": 1000000,
        "increaseLiquidity": 1500000,
        "decreaseLiquidity": 300000,
        "collect": 300000,
        "swap": 300000,
        "openTrading": 200000,
        "default": 500000,
    }

    def __init__(self, config_path=None):
        """
        Load gas configuration from JSON file.

        Args:
            config_path: Path to gas_config.json (searches default locations if None)

        Raises:
            ConfigError: If an explicit config_path does not exist
        """
        if config_path and not Path(config_path).exists():
            raise ConfigError(f"Gas config not found: {config_path}")
        self._config = self._load_config(config_path)

    def _load_config(self, config_path=None):
        """Load config from file or return defaults"""
        search_paths = [
            config_path,
            Path.cwd() / "gas_config.json",
            Path.home() / ".amm-ops" / "gas_config.json",
        ]

        for path in search_paths:
            if path and Path(path).exists():
                with open(path) as f:
                    config = json.load(f)
                limits = dict(self.DEFAULT_GAS_LIMITS)
                limits.update(config.get("gasLimit", {}))
                config["gasLimit"] = limits
                return config

        return {
            "maxFeePerGas": None,
            "maxPriorityFeePerGas": 1.5,
            "gasLimit": self.DEFAULT_GAS_LIMITS.copy(),
        }

    @property
    def maxFeePerGas(self):
        """Max fee per gas in Gwei (None = no limit)"""
        return self._config.get("maxFeePerGas")

    @property
    def maxPriorityFeePerGas(self):
        """Priority fee (tip) in Gwei"""
        return self._config.get("maxPriorityFeePerGas", 1.5)

    def getGasLimit(self, operation_type):
        """Gas limit for an operation type, falling back to "default" """
        gas_limits = self._config.get("gasLimit", self.DEFAULT_GAS_LIMITS)
        return gas_limits.get(operation_type, gas_limits.get("default", 500000))


def gwei_to_wei(value):
    return int(Web3.to_wei(Decimal(str(value)), "gwei"))


class GasManager:
    """
    EIP-1559 compliant gas management.

    Supports:
    - maxFeePerGas: Maximum total fee per gas unit (base + priority)
    - maxPriorityFeePerGas: Tip to validators for faster inclusion
    - gasLimit: Fallback gas units per transaction type
    """

    def __init__(self, manager, maxFeePerGas=None, maxPriorityFeePerGas=None, config=None):
        """
        Args:
            manager: Web3Manager instance
            maxFeePerGas: Max fee per gas in Gwei (overrides config)
            maxPriorityFeePerGas: Priority fee in Gwei (overrides config)
            config: GasConfig instance (created if None)
        """
        self.manager = manager
        self.config = config or GasConfig()
        self._maxFeePerGas = maxFeePerGas
        self._maxPriorityFeePerGas = maxPriorityFeePerGas

    @property
    def maxFeePerGas(self):
        if self._maxFeePerGas is not None:
            return self._maxFeePerGas
        return self.config.maxFeePerGas

    @property
    def maxPriorityFeePerGas(self):
        if self._maxPriorityFeePerGas is not None:
            return self._maxPriorityFeePerGas
        return self.config.maxPriorityFeePerGas

    def getGasLimit(self, operation_type=None):
        return self.config.getGasLimit(operation_type or "default")

    def getBaseFee(self):
        """Base fee of the latest block in Wei (0 on pre-London chains)"""
        latest_block = self.manager.w3.eth.get_block("latest")
        return latest_block.get("baseFeePerGas", 0) or 0

    def getGasParams(self):
        """
        EIP-1559 fee parameters for a transaction.

        Returns:
            Dict with maxFeePerGas and maxPriorityFeePerGas in Wei

        Raises:
            GasPriceTooHighError: If base fee exceeds maxFeePerGas
        """
        base_fee = self.getBaseFee()
        priority_fee_wei = gwei_to_wei(self.maxPriorityFeePerGas or 1.5)

        if self.maxFeePerGas is not None:
            max_fee_wei = gwei_to_wei(self.maxFeePerGas)
            if max_fee_wei < base_fee:
                raise GasPriceTooHighError(
                    f"Current base fee ({Web3.from_wei(base_fee, 'gwei')} Gwei) exceeds "
                    f"maxFeePerGas ({self.maxFeePerGas} Gwei)"
                )
        else:
            # No cap configured: 2x base fee plus tip
            max_fee_wei = 2 * base_fee + priority_fee_wei

        # Tip must not exceed the cap
        priority_fee_wei = min(priority_fee_wei, max_fee_wei)

        return {
            "maxFeePerGas": max_fee_wei,
            "maxPriorityFeePerGas": priority_fee_wei,
        }

    def estimateGas(self, contract_func, from_address, operation_type=None, value=0):
        """
        Estimate gas for a contract function or constructor call.

        Falls back to the configured limit when the node cannot estimate.

        Raises:
            RemoteRejectionError: If the remote contract rejects the call
        """
        params = {"from": from_address}
        if value:
            params["value"] = value
        try:
            return contract_func.estimate_gas(params)
        except ContractLogicError as e:
            raise to_remote_rejection(e, getattr(contract_func, "contract_abi", None)) from e
        except (ValueError, Web3Exception) as e:
            fallback = self.getGasLimit(operation_type)
            logger.debug(f"Gas estimation for {operation_type} failed ({e}), using {fallback}")
            return fallback
