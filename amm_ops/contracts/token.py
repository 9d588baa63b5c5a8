"""Managed ERC20 token (owner-gated trading switch)"""

from .erc20 import ERC20


class ManagedToken(ERC20):
    """
    ERC20 deployed by this toolkit.

    Constructor: (name, symbol, decimals, totalSupply, owner). The whole
    supply is minted to owner. openTrading is restricted to the owner.
    """

    ABI_NAME = "managed_token"

    @classmethod
    def deploy(cls, manager, tx_builder, factory, name, symbol, decimals, total_supply, owner=None):
        """
        Deploy a new token.

        Args:
            factory: Contract factory built from the token artifact
            total_supply: Supply in base units
            owner: Initial owner and holder (defaults to the signer)

        Returns:
            (ManagedToken, receipt)
        """
        owner = manager.checksum(owner or manager.address)
        address, receipt = tx_builder.deploy(
            factory, name, symbol, decimals, total_supply, owner,
            label=f"Deploy {symbol}",
        )
        return cls(manager, address, tx_builder), receipt

    def owner(self):
        return self.contract.functions.owner().call()

    def open_trading(self, output_roots, l2_block_number, new_limit):
        """Call openTrading(address[],uint256,uint256); owner only"""
        roots = [self.manager.checksum(a) for a in output_roots]
        contract_func = self.contract.functions.openTrading(roots, l2_block_number, new_limit)
        return self.tx_builder.build_and_send(
            contract_func,
            operation_type="openTrading",
            label="openTrading",
        )
