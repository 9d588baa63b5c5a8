"""Transaction utilities with EIP-1559 support"""

from web3.exceptions import ContractLogicError

from ..core.exceptions import ConfigError, TransactionError
from ..core.logs import get_logger
from .gas import GasManager
from .reverts import to_remote_rejection

logger = get_logger(__name__)


def tx_hash_hex(value):
    """Transaction hash as a 0x-prefixed hex string"""
    if isinstance(value, (bytes, bytearray)):
        text = bytes(value).hex()
    elif hasattr(value, "hex"):
        text = value.hex()
    else:
        text = str(value)
    return text if text.startswith("0x") else "0x" + text


def call(contract_func, block_identifier="latest"):
    """
    Read-only call, converting remote rejections.

    Raises:
        RemoteRejectionError: If the contract reverts
    """
    try:
        return contract_func.call(block_identifier=block_identifier)
    except ContractLogicError as e:
        raise to_remote_rejection(e, getattr(contract_func, "contract_abi", None)) from e


def check_receipt(receipt, label="Transaction"):
    """
    Raise TransactionError unless the receipt reports success.

    Returns:
        The receipt, for chaining
    """
    if receipt["status"] != 1:
        tx_hash = tx_hash_hex(receipt["transactionHash"])
        raise TransactionError(f"{label} failed: {tx_hash}", tx_hash=tx_hash, receipt=receipt)
    return receipt


class TransactionBuilder:
    """Build, sign and send EIP-1559 transactions, one at a time"""

    def __init__(self, manager, gas_manager=None):
        """
        Args:
            manager: Web3Manager instance (must have a signer to send)
            gas_manager: GasManager instance (created if None, loads from gas_config.json)
        """
        self.manager = manager
        self.gas_manager = gas_manager or GasManager(manager)

    def _base_tx(self, gas_limit, value=0):
        if self.manager.account is None:
            raise ConfigError("A signing account is required (set PRIVATE_KEY in wallet.env)")

        gas_params = self.gas_manager.getGasParams()
        tx = {
            "from": self.manager.address,
            "nonce": self.manager.get_nonce(),
            "gas": gas_limit,
            "maxFeePerGas": gas_params["maxFeePerGas"],
            "maxPriorityFeePerGas": gas_params["maxPriorityFeePerGas"],
            "chainId": self.manager.chain_id,
            "type": 2,  # EIP-1559 transaction type
        }
        if value > 0:
            tx["value"] = value
        return tx

    def build(self, contract_func, operation_type=None, gas_buffer=1.2, value=0, gas_limit=None):
        """
        Build an EIP-1559 transaction for a contract function or constructor.

        Args:
            contract_func: Bound contract function or constructor
            operation_type: Type of operation for fallback gas limit lookup
            gas_buffer: Multiplier for estimated gas (default 1.2 = +20%)
            value: ETH value to send in wei (default 0)
            gas_limit: Fixed gas limit (skips estimation)

        Returns:
            Transaction dictionary ready for signing

        Raises:
            GasPriceTooHighError: If base fee exceeds maxFeePerGas
            RemoteRejectionError: If estimation shows the call would revert
        """
        if gas_limit is None:
            estimated = self.gas_manager.estimateGas(
                contract_func, self.manager.address, operation_type, value
            )
            gas_limit = int(estimated * gas_buffer)

        tx = self._base_tx(gas_limit, value)
        return contract_func.build_transaction(tx)

    def send(self, tx, label="Transaction"):
        """Sign and send a built transaction, then wait for a successful receipt"""
        signed = self.manager.account.sign_transaction(tx)
        tx_hash = self.manager.w3.eth.send_raw_transaction(signed.raw_transaction)
        logger.debug(f"{label} sent: {tx_hash_hex(tx_hash)}")

        receipt = self.manager.w3.eth.wait_for_transaction_receipt(tx_hash)
        return check_receipt(receipt, label)

    def build_and_send(self, contract_func, operation_type=None, gas_buffer=1.2,
                       value=0, gas_limit=None, label=None):
        """
        Build, sign, send and await an EIP-1559 transaction.

        Returns:
            Transaction receipt (status 1)

        Raises:
            TransactionError: If the transaction was mined but reverted
            RemoteRejectionError: If gas estimation shows the call would revert
        """
        tx = self.build(contract_func, operation_type, gas_buffer, value, gas_limit)
        return self.send(tx, label or operation_type or "Transaction")

    def deploy(self, factory, *args, gas_limit=None, label="Deployment"):
        """
        Deploy a contract from an ABI/bytecode factory.

        Args:
            factory: Contract factory from Web3Manager.get_contract_factory
            *args: Constructor arguments

        Returns:
            (contract_address, receipt)
        """
        constructor = factory.constructor(*args)
        receipt = self.build_and_send(
            constructor,
            operation_type="deploy",
            gas_limit=gas_limit,
            label=label,
        )
        return receipt["contractAddress"], receipt
