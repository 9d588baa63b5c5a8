"""Uniswap V3 Pool contract wrapper"""

from eth_utils import keccak

from ..core.exceptions import PoolError
from ..utils.math import sqrt_price_x96_to_price
from ..utils.reverts import abi_signature
from ..utils.transactions import TransactionBuilder


class Pool:
    """Wrapper for Uniswap V3 Pool interactions"""

    def __init__(self, manager, address, tx_builder=None):
        """
        Args:
            manager: Web3Manager instance
            address: Pool contract address
            tx_builder: Shared TransactionBuilder (created if None)
        """
        self.manager = manager
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(self.address, "uniswap_v3_pool")
        self.tx_builder = tx_builder or TransactionBuilder(manager)

    def slot0(self):
        """Current price state as a dict"""
        s = self.contract.functions.slot0().call()
        return {
            "sqrtPriceX96": s[0],
            "tick": s[1],
            "observationIndex": s[2],
            "observationCardinality": s[3],
            "observationCardinalityNext": s[4],
            "feeProtocol": s[5],
            "unlocked": s[6],
        }

    @property
    def sqrt_price_x96(self):
        return self.slot0()["sqrtPriceX96"]

    @property
    def fee(self):
        return self.contract.functions.fee().call()

    @property
    def token0(self):
        return self.contract.functions.token0().call()

    @property
    def token1(self):
        return self.contract.functions.token1().call()

    @property
    def liquidity(self):
        return self.contract.functions.liquidity().call()

    def is_initialized(self):
        return self.sqrt_price_x96 != 0

    def fee_growth_global(self):
        return (
            self.contract.functions.feeGrowthGlobal0X128().call(),
            self.contract.functions.feeGrowthGlobal1X128().call(),
        )

    def state(self):
        """Everything the pool-state report shows"""
        growth0, growth1 = self.fee_growth_global()
        return {
            "address": self.address,
            "token0": self.token0,
            "token1": self.token1,
            "fee": self.fee,
            "slot0": self.slot0(),
            "liquidity": self.liquidity,
            "feeGrowthGlobal0X128": growth0,
            "feeGrowthGlobal1X128": growth1,
        }

    def get_price(self, decimals0=18, decimals1=18):
        """Price of token0 in token1"""
        sqrt_price = self.sqrt_price_x96
        if sqrt_price == 0:
            raise PoolError(f"Pool {self.address} is not initialized")
        return sqrt_price_x96_to_price(sqrt_price, decimals0, decimals1)

    def initialize(self, sqrt_price_x96):
        contract_func = self.contract.functions.initialize(sqrt_price_x96)
        return self.tx_builder.build_and_send(
            contract_func,
            operation_type="initialize",
            label="Initialize pool",
        )

    def _event_abi(self, name):
        for entry in self.contract.abi:
            if entry.get("type") == "event" and entry.get("name") == name:
                return entry
        raise PoolError(f"Event {name} not in pool ABI")

    def events(self, name, from_block, to_block="latest"):
        """
        Decoded pool events between two blocks (inclusive).

        Args:
            name: "Swap", "Mint" or "Burn"
        """
        topic = "0x" + keccak(text=abi_signature(self._event_abi(name))).hex()
        logs = self.manager.w3.eth.get_logs({
            "address": self.address,
            "fromBlock": from_block,
            "toBlock": to_block,
            "topics": [topic],
        })
        event = getattr(self.contract.events, name)()
        return [event.process_log(log) for log in logs]
