"""Uniswap V3 SwapRouter contract wrapper"""

from ..utils.transactions import TransactionBuilder


class SwapRouter:
    """Wrapper for SwapRouter single-pool swaps"""

    def __init__(self, manager, address, tx_builder=None):
        self.manager = manager
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(self.address, "uniswap_v3_router")
        self.tx_builder = tx_builder or TransactionBuilder(manager)

    def exact_input_single(self, token_in, token_out, fee, amount_in, deadline,
                           amount_out_minimum=0, recipient=None, sqrt_price_limit_x96=0):
        """
        Swap an exact amount of token_in for as much token_out as the pool gives.

        Returns:
            Transaction receipt
        """
        params = {
            "tokenIn": self.manager.checksum(token_in),
            "tokenOut": self.manager.checksum(token_out),
            "fee": fee,
            "recipient": self.manager.checksum(recipient or self.manager.address),
            "deadline": deadline,
            "amountIn": amount_in,
            "amountOutMinimum": amount_out_minimum,
            "sqrtPriceLimitX96": sqrt_price_limit_x96,
        }

        return self.tx_builder.build_and_send(
            self.contract.functions.exactInputSingle(params),
            operation_type="swap",
            label="Swap",
        )
