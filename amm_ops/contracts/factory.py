"""Uniswap V3 Factory contract wrapper"""

from web3.logs import DISCARD

from ..core.config import Config
from ..core.exceptions import PoolError
from ..utils.transactions import TransactionBuilder


class UniswapV3Factory:
    """Wrapper for UniswapV3Factory pool lookup and creation"""

    def __init__(self, manager, address, tx_builder=None):
        self.manager = manager
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(self.address, "uniswap_v3_factory")
        self.tx_builder = tx_builder or TransactionBuilder(manager)

    def get_pool(self, token_a, token_b, fee):
        """Pool address for the pair and fee, or None if no pool exists"""
        pool = self.contract.functions.getPool(
            self.manager.checksum(token_a), self.manager.checksum(token_b), fee
        ).call()
        if int(pool, 16) == 0:
            return None
        return self.manager.checksum(pool)

    def create_pool(self, token_a, token_b, fee):
        """
        Create a pool.

        Returns:
            Dict with pool address and receipt
        """
        contract_func = self.contract.functions.createPool(
            self.manager.checksum(token_a), self.manager.checksum(token_b), fee
        )
        receipt = self.tx_builder.build_and_send(
            contract_func,
            operation_type="createPool",
            label="Create pool",
        )

        events = self.contract.events.PoolCreated().process_receipt(receipt, errors=DISCARD)
        if events:
            pool = events[0]["args"]["pool"]
        else:
            pool = self.get_pool(token_a, token_b, fee)
        if not pool or pool == Config.ZERO_ADDRESS:
            raise PoolError(f"createPool succeeded but no pool found for fee {fee}")

        return {"pool": self.manager.checksum(pool), "receipt": receipt}
