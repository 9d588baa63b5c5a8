"""ERC20 token contract wrapper"""

from ..core.config import Config
from ..utils.math import format_units, parse_units
from ..utils.transactions import TransactionBuilder


class ERC20:
    """Wrapper for ERC20 token interactions"""

    ABI_NAME = "erc20"

    def __init__(self, manager, address, tx_builder=None):
        """
        Args:
            manager: Web3Manager instance
            address: Token contract address
            tx_builder: Shared TransactionBuilder (created if None)
        """
        self.manager = manager
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(self.address, self.ABI_NAME)
        self.tx_builder = tx_builder or TransactionBuilder(manager)
        self._info = None

    @property
    def info(self):
        """Get token info (cached)"""
        if self._info is None:
            self._info = {
                "address": self.address,
                "symbol": self.contract.functions.symbol().call(),
                "name": self.contract.functions.name().call(),
                "decimals": self.contract.functions.decimals().call(),
            }
        return self._info

    @property
    def symbol(self):
        return self.info["symbol"]

    @property
    def name(self):
        return self.info["name"]

    @property
    def decimals(self):
        return self.info["decimals"]

    def total_supply(self):
        return self.contract.functions.totalSupply().call()

    def balance_of(self, address=None):
        """Get token balance in base units"""
        addr = address or self.manager.address
        return self.contract.functions.balanceOf(self.manager.checksum(addr)).call()

    def allowance(self, spender, owner=None):
        owner_addr = owner or self.manager.address
        return self.contract.functions.allowance(
            self.manager.checksum(owner_addr), self.manager.checksum(spender)
        ).call()

    def to_wei(self, amount):
        """Convert whole-token amount to base units"""
        return parse_units(amount, self.decimals)

    def from_wei(self, amount):
        """Convert base units to a whole-token Decimal"""
        return format_units(amount, self.decimals)

    def approve(self, spender, amount_wei):
        """
        Approve spender. Returns tx receipt, or None if the allowance already covers amount_wei.
        """
        if self.allowance(spender) >= amount_wei:
            return None

        contract_func = self.contract.functions.approve(self.manager.checksum(spender), amount_wei)
        return self.tx_builder.build_and_send(
            contract_func,
            operation_type="approve",
            label=f"Approve {self.symbol}",
        )

    def approve_max(self, spender):
        """Unlimited approval, skipped when the allowance is already at least half of max"""
        max_amount = Config.MAX_UINT256
        if self.allowance(spender) >= max_amount // 2:
            return None
        return self.approve(spender, max_amount)

    def transfer(self, recipient, amount_wei):
        contract_func = self.contract.functions.transfer(self.manager.checksum(recipient), amount_wei)
        return self.tx_builder.build_and_send(
            contract_func,
            operation_type="transfer",
            label=f"Transfer {self.symbol}",
        )
